"""Preparación del vídeo: muestreo de instantes y decodificación de fotogramas."""

from .frame_sampling import sample_timestamps
from .video_decoder import OpenCVVideoDecoder, VideoDecoderBase, VideoInfo, probe_video_info

__all__ = [
    "sample_timestamps",
    "VideoDecoderBase",
    "OpenCVVideoDecoder",
    "VideoInfo",
    "probe_video_info",
]
