import pytest
import structlog


@pytest.fixture(autouse=True)
def _silence_structlog():
    # Unconfigured structlog prints to stdout, which the CLI reserves for completions.
    structlog.configure(
        processors=[structlog.processors.KeyValueRenderer()],
        logger_factory=structlog.ReturnLoggerFactory(),
    )
    yield
    structlog.reset_defaults()
