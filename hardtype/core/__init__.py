# Core module exports
from hardtype.core.config import settings, get_settings, Settings, PrerequisitePolicy
from hardtype.core.logging import (
    configure_logging,
    get_logger,
    bind_context,
    clear_context,
    unbind_context,
    generate_run_id,
    engine_logger,
    generator_logger,
)
