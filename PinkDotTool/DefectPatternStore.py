import logging
import os
import re
from typing import Dict, Iterable, List, Optional, Tuple

import numpy as np
from pydantic import BaseModel, Field

from .DefectSite import DefectSite
from .Exceptions import SourceOpenFailure

logger = logging.getLogger(__name__)

PatternKey = Tuple[str, int, int]

# <camera>_<width>x<height>.csv, e.g. 650D_1808x1190.csv
PATTERN_FILENAME = re.compile(r"^(?P<camera>.+)_(?P<width>\d+)x(?P<height>\d+)\.csv$")


class DefectPatternStore(BaseModel):
    """
    Lookup of known defect coordinates keyed by camera and resolution.

    Patterns are registered in code with ``register()`` or loaded from
    comma-separated ``x,y`` files.  A key with no sites is treated as
    unknown.

    Methods
    -------
    get_all_dots(camera_type, width, height)
        Return the registered sites, or ``None`` for an unknown key.
    register(camera_type, width, height, sites)
        Add or replace the pattern for a key.
    load_file(path, camera_type, width, height)
        Register the sites listed in a coordinate file.
    from_directory(directory)
        Build a store from every ``<camera>_<w>x<h>.csv`` file in a
        directory.

    Examples
    --------
    >>> store = DefectPatternStore()
    >>> store.register("650D", 100, 100, [(50, 50)])
    >>> store.get_all_dots("650D", 100, 100)
    [DefectSite(x=50, y=50)]
    """
    patterns: Dict[PatternKey, List[DefectSite]] = Field(default_factory=dict)

    def register(self, camera_type: str, width: int, height: int,
                 sites: Iterable) -> None:
        sites = [
            site if isinstance(site, DefectSite) else DefectSite.from_pair(site)
            for site in sites
        ]
        self.patterns[(camera_type, int(width), int(height))] = sites
        logger.debug("Registered %d defect sites for %s at %dx%d",
                     len(sites), camera_type, width, height)

    def get_all_dots(self, camera_type: str, width: int,
                     height: int) -> Optional[List[DefectSite]]:
        sites = self.patterns.get((camera_type, int(width), int(height)))
        if not sites:
            return None
        return list(sites)

    def load_file(self, path: str, camera_type: str, width: int,
                  height: int) -> int:
        """
        Register the coordinates listed in a text file.

        Parameters
        ----------
        path : str
            Comma-separated file with a single header line followed by one
            ``x,y`` pair per line.
        camera_type : str
            Camera identifier the pattern belongs to.
        width, height : int
            Resolution the pattern belongs to.

        Returns
        -------
        int
            Number of sites registered.

        Raises
        ------
        SourceOpenFailure
            If the file cannot be read or does not hold two integer columns.
        """
        try:
            data = np.loadtxt(path, skiprows=1, delimiter=',', dtype=int,
                              ndmin=2)
        except (OSError, ValueError) as e:
            raise SourceOpenFailure(
                f"Failed to read defect pattern file: {path}") from e
        if data.size and data.shape[1] != 2:
            raise SourceOpenFailure(
                f"Expected two columns (x, y) in {path}, got {data.shape[1]}")
        self.register(camera_type, width, height,
                      [tuple(row) for row in data.reshape(-1, 2)])
        return int(data.size // 2)

    @classmethod
    def from_directory(cls, directory: str) -> "DefectPatternStore":
        try:
            names = sorted(os.listdir(directory))
        except OSError as e:
            raise SourceOpenFailure(
                f"Cannot list defect pattern directory: {directory}") from e

        store = cls()
        for name in names:
            match = PATTERN_FILENAME.match(name)
            if match is None:
                continue
            store.load_file(os.path.join(directory, name),
                            match.group("camera"),
                            int(match.group("width")),
                            int(match.group("height")))
        logger.info("Loaded %d defect patterns from %s", len(store.patterns),
                    directory)
        return store
