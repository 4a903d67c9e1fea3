"""Fetch-and-compress pipeline and its collaborators."""

from kevimage.pipeline.compressor import JpegCompressor
from kevimage.pipeline.fetcher import ImageFetcher
from kevimage.pipeline.producer import Compressor, Fetcher, ImagePipeline

__all__ = ["Compressor", "Fetcher", "ImageFetcher", "ImagePipeline", "JpegCompressor"]
