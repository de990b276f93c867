"""``photoshelf`` console script."""

from invoke import Collection, Program

from .. import __version__
from . import tasks

program = Program(
    namespace=Collection.from_module(tasks),
    name="photoshelf",
    binary="photoshelf",
    version=__version__,
)
