"""Use case for uploading one OTA firmware image to the device."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence

from edgelink.domain.ports import FirmwarePort, ProgressFn, UseCaseError
from edgelink.domain.validation import validate_firmware_selection
from edgelink.usecases.error_mapping import map_api_error


@dataclass
class UploadFirmware:
    """Validate the file selection and stream it to ``/OTAupdate``."""

    firmware_port: FirmwarePort

    def validate(self, paths: Sequence[str | Path]) -> Path:
        """Return the single selected image.

        Raises:
            ValidationError: Unless exactly one existing file is selected.
        """
        return validate_firmware_selection(paths)

    def __call__(self, path: Path, on_progress: Optional[ProgressFn] = None) -> None:
        """Upload ``path``; may run on a worker thread.

        Raises:
            UseCaseError: If the upload failed at the transport or HTTP level.
        """
        try:
            self.firmware_port.upload_firmware(path, on_progress)
        except UseCaseError:
            raise
        except Exception as exc:
            raise map_api_error(
                exc,
                default_code="FIRMWARE_UPLOAD_FAILED",
                default_message="Firmware upload failed.",
            ) from exc


__all__ = ["UploadFirmware"]
