from ._base import TOOL_VERSION, CargoLinkArgsError, ConfigError, FrontEndError, ToolInvocationError
from .classifier import Destination, classify_link_args, split_option, validate_front_end
from .config import LinkArgsConfig, load_config
from .link_args import LinkArgsResult, extract_link_line, split_link_line
from .relocator import DefFileRelocator
from .tokenizer import parse_quotes
from .writer import LinkArgsWriter

__all__ = [
    "CargoLinkArgsError",
    "ConfigError",
    "DefFileRelocator",
    "Destination",
    "FrontEndError",
    "LinkArgsConfig",
    "LinkArgsResult",
    "LinkArgsWriter",
    "TOOL_VERSION",
    "ToolInvocationError",
    "classify_link_args",
    "extract_link_line",
    "load_config",
    "parse_quotes",
    "split_link_line",
    "split_option",
    "validate_front_end",
]
