"""FluoTitre IO — channel loading, input scanning, result writing."""

from fluotitre.io.loader import (
    Channel,
    ChannelSet,
    ImageLoader,
    TiffChannelLoader,
    channel_index_from_name,
)
from fluotitre.io.scanner import InputScanner
from fluotitre.io.writer import ResultWriter, output_dir_for, read_summary

__all__ = [
    "Channel",
    "ChannelSet",
    "ImageLoader",
    "InputScanner",
    "ResultWriter",
    "TiffChannelLoader",
    "channel_index_from_name",
    "output_dir_for",
    "read_summary",
]
