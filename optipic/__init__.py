from optipic.batch import BatchJob, JobResult, build_zip, output_name, run_batch, summarize
from optipic.encoder import EncodedResult, EncodeOptions, encode_with_quality
from optipic.engine import encode
from optipic.pipeline import Pipeline, TransformSpec, build_pipeline
from optipic.request import EncodeRequest, Resize, build_request, resolve_format
from optipic.search import encode_to_target_size

__version__ = "0.1.0"
