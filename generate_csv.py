#!/usr/bin/env python3
"""
CSV output for package size reports.
Writes the sorted sizes to disk and reads a report back.
"""

import csv
import os
import stat
import tempfile
from pathlib import Path
from typing import Iterable, List, Union

from errors import WriteFailed
from package_info import CSV_HEADER, PackageInfo


def report_mode(path: Path) -> int:
    """Permission bits for the report: the existing file's, else 0o666 minus the umask"""
    try:
        return stat.S_IMODE(os.stat(path).st_mode)
    except FileNotFoundError:
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask


def write_csv(path: Union[str, Path], infos: Iterable[PackageInfo]) -> Path:
    """
    Write package sizes to a CSV file, replacing any previous report.

    Rows are written to a temporary file next to the target and moved
    into place once complete.

    Raises:
        WriteFailed: on any I/O or encoding error
    """
    path = Path(path)
    tmp_name = None
    try:
        with tempfile.NamedTemporaryFile('w', newline='', encoding='utf-8', dir=path.parent,
                                         prefix=f'.{path.name}.', suffix='.tmp',
                                         delete=False) as csvfile:
            tmp_name = csvfile.name
            writer = csv.writer(csvfile, quoting=csv.QUOTE_MINIMAL, lineterminator='\n')
            writer.writerow(CSV_HEADER)
            for info in infos:
                writer.writerow(info.as_row())
        os.chmod(tmp_name, report_mode(path))
        os.replace(tmp_name, path)
    except (OSError, ValueError, csv.Error) as e:
        if tmp_name and os.path.exists(tmp_name):
            os.remove(tmp_name)
        raise WriteFailed(f"Failed to write CSV {path}: {e}") from e

    return path


def read_csv(path: Union[str, Path]) -> List[PackageInfo]:
    """Parse a report written by write_csv back into PackageInfo records."""
    infos = []
    with open(path, 'r', newline='', encoding='utf-8') as csvfile:
        reader = csv.DictReader(csvfile)
        for row in reader:
            infos.append(PackageInfo(
                name=row['Package Name'],
                raw_size=int(row['Size (Bytes)']),
                pretty_size=row['Size (Pretty)'],
            ))
    return infos
