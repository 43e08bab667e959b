"""AWS Lambda entry point.

Point the function's handler at ``transports.aws_lambda_handler.handler`` and
set ``TRACE_WRAPPER_HANDLER`` to the original ``<module>.<function>``.
"""

from __future__ import annotations

from trace_wrapper.invocation import build_handler
from trace_wrapper.main import configure_logging
from trace_wrapper.settings import apply_environment_defaults, get_settings

apply_environment_defaults()
settings = get_settings()
configure_logging(settings.log_level)

handler = build_handler(settings)
