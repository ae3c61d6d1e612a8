"""Site generation: bounded rendering pipeline and output files."""

from .models import BuildStats
from .pipeline import BuildPipeline, get_almost_max_procs
from .generator import SiteGenerator

__all__ = ["BuildStats", "BuildPipeline", "get_almost_max_procs", "SiteGenerator"]
