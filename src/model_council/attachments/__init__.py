"""Attachment MIME detection and base64 codec."""

from model_council.attachments.codec import (
    DECODE_ERROR_TEXT,
    GENERIC_MIME,
    decode_bytes,
    decode_text,
    detect_type,
    encode_bytes,
    is_image_like,
    is_text_like,
    is_video_like,
    parse_data_uri,
    to_data_uri,
    wrap_text_file,
)

__all__ = [
    "DECODE_ERROR_TEXT",
    "GENERIC_MIME",
    "decode_bytes",
    "decode_text",
    "detect_type",
    "encode_bytes",
    "is_image_like",
    "is_text_like",
    "is_video_like",
    "parse_data_uri",
    "to_data_uri",
    "wrap_text_file",
]
