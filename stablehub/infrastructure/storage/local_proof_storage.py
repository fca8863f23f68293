from __future__ import annotations

import logging
import re
import time
from pathlib import Path

from stablehub.application.exceptions import UpstreamFailure
from stablehub.application.ports.proof_storage import ProofStoragePort
from stablehub.domain.entities.verification import ProofDocument

_SAFE = re.compile(r"[^A-Za-z0-9_-]")


class LocalProofStorage(ProofStoragePort):
    """Payment-proof bucket on the local filesystem. Files are named `{owner}_{millis}.{ext}`."""

    def __init__(self, root_dir: str, public_base_url: str | None = None) -> None:
        self._root = Path(root_dir)
        self._root.mkdir(parents=True, exist_ok=True)
        self._public_base_url = public_base_url.rstrip("/") if public_base_url else None
        self._logger = logging.getLogger(__name__)

    def upload(self, owner_id: str, document: ProofDocument) -> str:
        ext = _SAFE.sub("", document.extension) or "bin"
        name = f"{_SAFE.sub('', owner_id) or 'anonymous'}_{int(time.time() * 1000)}.{ext}"
        path = self._root / name
        suffix = 1
        while path.exists():
            path = self._root / f"{name.rsplit('.', 1)[0]}-{suffix}.{ext}"
            suffix += 1
        try:
            path.write_bytes(document.data)
        except OSError as e:
            raise UpstreamFailure(f"Could not store payment proof: {e}") from e
        self._logger.info("Payment proof stored", extra={"proof_ref": path.name, "size": len(document.data)})
        return path.name

    def public_url(self, ref: str) -> str | None:
        if not ref:
            return None
        if self._public_base_url:
            return f"{self._public_base_url}/{ref}"
        return str((self._root / ref).resolve())
