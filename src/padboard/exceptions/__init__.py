"""
Custom exception hierarchy for padboard.

## Exception Hierarchy

```
PadboardError (base)
├── AudioError
│   ├── AudioFileNotFoundError
│   ├── UnsupportedFormatError
│   ├── DecodeFailureError
│   ├── MissingExternalToolError
│   └── ExternalToolFailureError
├── AudioDeviceError
│   └── AudioDeviceInUseError
├── PadNotFoundError
├── ConfigurationError
│   ├── ConfigFileInvalidError
│   └── ConfigValidationError
└── PersistenceError
    ├── PersistenceReadError
    └── PersistenceWriteError
```

All custom exceptions inherit from `PadboardError`, which provides
`user_message`, `technical_message`, `recoverable` and `recovery_hint`.

### Example: adding an .m4a clip without ffmpeg

```python
try:
    board.add(Path("intro.m4a"))
except MissingExternalToolError as e:
    show_dialog(e.get_full_message())   # "install ffmpeg ..."
except DecodeFailureError as e:
    show_dialog(e.get_full_message())   # "file may be corrupted"
```
"""

from .audio import (
    AudioDeviceError,
    AudioDeviceInUseError,
    AudioError,
    AudioFileNotFoundError,
    DecodeFailureError,
    ExternalToolFailureError,
    MissingExternalToolError,
    UnsupportedFormatError,
)
from .base import PadboardError, PadNotFoundError
from .config import ConfigFileInvalidError, ConfigurationError, ConfigValidationError
from .handlers import (
    ErrorCollector,
    ErrorContext,
    collect_errors,
    format_error_for_display,
    wrap_audio_device_error,
    wrap_pydantic_error,
)
from .persistence import PersistenceError, PersistenceReadError, PersistenceWriteError

__all__ = [
    # Audio
    "AudioDeviceError",
    "AudioDeviceInUseError",
    "AudioError",
    "AudioFileNotFoundError",
    "DecodeFailureError",
    "ExternalToolFailureError",
    "MissingExternalToolError",
    "UnsupportedFormatError",
    # Config
    "ConfigFileInvalidError",
    "ConfigValidationError",
    "ConfigurationError",
    # Base
    "PadNotFoundError",
    "PadboardError",
    # Persistence
    "PersistenceError",
    "PersistenceReadError",
    "PersistenceWriteError",
    # Handlers
    "ErrorCollector",
    "ErrorContext",
    "collect_errors",
    "format_error_for_display",
    "wrap_audio_device_error",
    "wrap_pydantic_error",
]
