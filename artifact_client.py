"""
GitHub Actions Artifact Client.

Uploads files as a workflow artifact through the Actions results service
(artifact protocol v4): create the artifact, PUT a zip of the files to the
signed blob URL, then finalize with the zip's size and SHA-256.
"""

import os
import io
import json
import base64
import hashlib
import logging
import zipfile
from typing import Dict, List, Any, Optional, Mapping, Tuple

import requests

from error_handling import handle_api_errors, handle_pipeline_phase, WriteError

logger = logging.getLogger(__name__)

ARTIFACT_SERVICE = "twirp/github.actions.results.api.v1.ArtifactService"
ARTIFACT_VERSION = 4
UPLOAD_TIMEOUT = 300


class ArtifactRuntime:
    """Credentials for the Actions results service, read from the runner environment."""

    def __init__(self, token: str, results_url: str):
        self.token = token
        self.results_url = results_url.rstrip("/")

    @classmethod
    def from_environ(cls, environ: Optional[Mapping[str, str]] = None) -> Optional["ArtifactRuntime"]:
        environ = os.environ if environ is None else environ
        token = environ.get("ACTIONS_RUNTIME_TOKEN")
        results_url = environ.get("ACTIONS_RESULTS_URL")
        if not token or not results_url:
            return None
        return cls(token, results_url)

    def backend_ids(self) -> Tuple[str, str]:
        """Return (workflow run backend id, workflow job run backend id) from the token's scopes."""
        try:
            payload = self.token.split(".")[1]
            payload += "=" * (-len(payload) % 4)
            claims = json.loads(base64.urlsafe_b64decode(payload))
        except (IndexError, ValueError) as exc:
            raise WriteError("ACTIONS_RUNTIME_TOKEN is not a valid JWT") from exc

        for scope in str(claims.get("scp", "")).split(" "):
            parts = scope.split(":")
            if parts[0] == "Actions.Results" and len(parts) == 3:
                return parts[1], parts[2]
        raise WriteError("Failed to get backend IDs: no Actions.Results scope in runtime token")

    def headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.token}",
            "Content-Type": "application/json",
            "User-Agent": "copilot-usage-report",
        }


@handle_api_errors(max_attempts=3, base_delay=1.0)
def _twirp_post(runtime: ArtifactRuntime, method: str, body: Dict[str, Any]) -> Dict[str, Any]:
    url = f"{runtime.results_url}/{ARTIFACT_SERVICE}/{method}"
    response = requests.post(url, headers=runtime.headers(), json=body, timeout=30)
    response.raise_for_status()
    return response.json()


@handle_api_errors(max_attempts=3, base_delay=1.0)
def _upload_blob(signed_url: str, content: bytes) -> None:
    response = requests.put(
        signed_url,
        data=content,
        headers={"x-ms-blob-type": "BlockBlob", "Content-Type": "application/zip"},
        timeout=UPLOAD_TIMEOUT,
    )
    response.raise_for_status()


def build_zip(files: List[str], root_directory: str) -> bytes:
    """Zip ``files`` with archive names relative to ``root_directory``."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        for path in files:
            arcname = os.path.relpath(os.path.abspath(path), os.path.abspath(root_directory))
            if arcname.startswith(".."):
                raise WriteError(
                    f"{path} is not inside the artifact root directory {root_directory}",
                    details={"file_path": path, "root_directory": root_directory},
                )
            archive.write(path, arcname)
    return buffer.getvalue()


@handle_pipeline_phase(phase_name="UPLOAD_ARTIFACT", error_cls=WriteError)
def upload_artifact(
    name: str,
    files: List[str],
    root_directory: str = ".",
    runtime: Optional[ArtifactRuntime] = None,
) -> Optional[str]:
    """
    Upload files as a named workflow artifact.

    Args:
        name: Artifact name
        files: Paths of the files to include
        root_directory: Directory the archive paths are relative to
        runtime: Results service credentials (defaults to the runner environment)

    Returns:
        The artifact id, or None when not running inside a GitHub Actions runner

    Raises:
        WriteError: If any step of the upload fails.
    """
    runtime = runtime or ArtifactRuntime.from_environ()
    if runtime is None:
        logger.warning(
            "[UPLOAD_ARTIFACT] Not running in GitHub Actions, skipping upload of '%s' (%s)",
            name,
            ", ".join(files),
        )
        return None

    run_id, job_run_id = runtime.backend_ids()
    ids = {"workflowRunBackendId": run_id, "workflowJobRunBackendId": job_run_id}

    content = build_zip(files, root_directory)
    digest = hashlib.sha256(content).hexdigest()

    created = _twirp_post(runtime, "CreateArtifact", {**ids, "name": name, "version": ARTIFACT_VERSION})
    signed_url = created.get("signedUploadUrl") or created.get("signed_upload_url")
    if not created.get("ok") or not signed_url:
        raise WriteError(f"CreateArtifact for '{name}' was rejected", details={"response": created})

    logger.info("[UPLOAD_ARTIFACT] Uploading %d bytes for artifact '%s'", len(content), name)
    _upload_blob(signed_url, content)

    finalized = _twirp_post(runtime, "FinalizeArtifact", {
        **ids,
        "name": name,
        "size": str(len(content)),
        "hash": f"sha256:{digest}",
    })
    if not finalized.get("ok"):
        raise WriteError(f"FinalizeArtifact for '{name}' was rejected", details={"response": finalized})

    artifact_id = str(finalized.get("artifactId") or finalized.get("artifact_id") or "")
    logger.info("[UPLOAD_ARTIFACT] Artifact '%s' uploaded (id %s)", name, artifact_id)
    return artifact_id
