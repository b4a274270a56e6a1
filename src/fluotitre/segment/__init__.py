"""FluoTitre Segment — thresholded masks and watershed splitting."""

from fluotitre.segment.segmenter import Segmenter
from fluotitre.segment.watershed import watershed_split

__all__ = ["Segmenter", "watershed_split"]
