from rich.pretty import pprint

from declopts import *


class Copy(Options):
    """Copy files into a target directory."""
    debug = Field(bool, short="d", long="debug", description="Print the parsed configuration")
    jobs = Field(int, short="j", long="jobs", factory=lambda: 1, placeholder="N")
    target = Field(str, short="t", long="target", placeholder="DIR", description="Destination directory")
    files = Field(list[str], placeholder="FILE")


if __name__ == '__main__':
    pprint(Copy.parse())
