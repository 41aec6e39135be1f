import logging
from typing import Optional

from optipic import encoder, search
from optipic.encoder import EncodedResult, EncodeOptions
from optipic.pipeline import TransformSpec, build_pipeline
from optipic.request import EncodeRequest

logger = logging.getLogger(__name__)


def transform_spec(request: EncodeRequest) -> TransformSpec:
    return TransformSpec(
        resize=request.resize,
        keep_metadata=request.keep_metadata,
        background=request.effective_background,
    )


def encode(request: EncodeRequest, deadline: Optional[float] = None) -> EncodedResult:
    """Encode one image: a single pass, or a size search when a target is set.

    Pillow errors (corrupt input, unsupported modes) are raised as-is.
    """
    fmt = request.resolved_format
    pipeline = build_pipeline(request.source, transform_spec(request))
    options = EncodeOptions(lossless=request.lossless, progressive=request.progressive)

    if request.target_bytes > 0:
        return search.encode_to_target_size(
            pipeline, fmt, request.target_bytes, request.quality, options, deadline=deadline
        )
    return encoder.encode_with_quality(pipeline, fmt, request.quality, options)
