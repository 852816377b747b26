from utils.get_endpoint import get_endpoint
from utils.response_utils import decode_body, robust_parse_text, to_text

__all__ = ["get_endpoint", "decode_body", "robust_parse_text", "to_text"]
