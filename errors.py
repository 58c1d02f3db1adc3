"""
Terminal errors for the package size report
"""


class PackageSizeError(Exception):
    """Base class for failures that abort the whole run"""
    pass


class CredentialsNotFound(PackageSizeError):
    """Raised when no registry auth token can be read from the npmrc file"""
    pass


class OrgFetchFailed(PackageSizeError):
    """Raised when the organization package listing cannot be fetched or parsed"""
    pass


class OrgEmpty(PackageSizeError):
    """Raised when the organization exists but owns no packages"""
    pass


class NoSizesRetrieved(PackageSizeError):
    """Raised when the organization has packages but none of their sizes resolved"""
    pass


class WriteFailed(PackageSizeError):
    """Raised when the CSV report cannot be written"""
    pass
