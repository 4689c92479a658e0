from .settings import CaptureSettings, build_arg_parser, parse_cli_args, read_config_file

__all__ = ["CaptureSettings", "build_arg_parser", "parse_cli_args", "read_config_file"]
