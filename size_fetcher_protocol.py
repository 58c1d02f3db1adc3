"""
Protocol/Interface for package size fetchers
"""
from typing import Protocol, Optional

from package_info import PackageInfo


class PackageSizeFetcher(Protocol):
    """Protocol that all package size fetchers must implement"""
    
    def fetch_package_size(self, name: str) -> Optional[PackageInfo]:
        """
        Fetch the unpacked size of a package's latest version
        
        Args:
            name: The package name, scoped names included
            
        Returns:
            PackageInfo for the package, or None if the size could not be resolved
        """
        ...
