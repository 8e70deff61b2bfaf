"""rabbit_convertor – top-level package

Converts ``.rab`` slide markup into slide images plus HTML and packs the
result into a container string that template filters can read back.

Sets up a minimal logging configuration so that every sub-module can call

```python
import logging
logger = logging.getLogger(__name__)
```

and honour a single environment variable `RABBIT_LOG_LEVEL`.
"""

from __future__ import annotations

import logging
import os

# ------------------------------------------------------------------
# Default logging – honour env var, otherwise INFO.
# ------------------------------------------------------------------
LOG_LEVEL = os.getenv("RABBIT_LOG_LEVEL", "INFO").upper()
if not logging.getLogger().handlers:
    logging.basicConfig(
        level=LOG_LEVEL,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

# Public API re-exports ------------------------------------------------
from .container import RenderResult, decode, encode, extract_containers  # noqa: E402
from .converter import RabbitConverter  # noqa: E402
from .filters import register_filters, slide_only, title_slide_link  # noqa: E402
from .invocation import SlideDescriptor, run_isolated  # noqa: E402

__all__ = [
    "RabbitConverter",
    "RenderResult",
    "SlideDescriptor",
    "decode",
    "encode",
    "extract_containers",
    "register_filters",
    "run_isolated",
    "slide_only",
    "title_slide_link",
]
