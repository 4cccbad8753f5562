# SPDX-License-Identifier: MIT
"""Test configuration for the analysis schema migrator.

Keeps telemetry local and provides record and chain fixtures shared by the
migration tests.
"""

from __future__ import annotations

from typing import Any

import logfire
import pytest

from migration.transform import Version, create_transform_chain, define_transform

logfire.configure(send_to_logfire=False, console=False)


@pytest.fixture(autouse=True)
def _isolate_settings_env(monkeypatch):
    """Drop ``SM_`` variables inherited from the developer environment."""
    import os

    for key in list(os.environ):
        if key.startswith("SM_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture(autouse=True)
def _reset_telemetry():
    """Ensure study metrics are empty before and after each test."""
    from observability import telemetry

    telemetry.reset()
    yield
    telemetry.reset()


def _make_record(
    version: int,
    *,
    name: str = "consensus_sequence",
    analysis_id: str = "an-1",
    study_id: str = "STUDY-1",
    **content: Any,
) -> dict[str, Any]:
    """Return an analysis record in the record store's JSON shape."""
    return {
        "analysisType": {"name": name, "version": version},
        "analysisState": "PUBLISHED",
        "analysisId": analysis_id,
        "studyId": study_id,
        "createdAt": "2022-01-01T00:00:00",
        "updatedAt": "2022-01-02T00:00:00",
        "firstPublishedAt": None,
        "publishedAt": None,
        "analysisStateHistory": [],
        "files": [],
        "samples": [],
        **content,
    }


@pytest.fixture()
def make_record():
    """Return a factory for analysis records."""
    return _make_record


def _bump(field: str):
    def _apply(record: dict[str, Any]) -> dict[str, Any]:
        return {**record, field: record.get(field, 0) + 1}

    return _apply


@pytest.fixture()
def counting_chain():
    """Chain ``t@1 -> t@4`` where each step increments ``steps``."""
    chain = create_transform_chain(
        define_transform(Version("t", 1), Version("t", 2), _bump("steps")),
        define_transform(Version("t", 2), Version("t", 3), _bump("steps")),
        define_transform(Version("t", 3), Version("t", 4), _bump("steps")),
    )
    assert chain.success
    return chain.data


@pytest.fixture(scope="session")
def rsa_keys() -> tuple[bytes, str]:
    """Return a PEM private key and its PEM public key for signing tokens."""
    from cryptography.hazmat.primitives import serialization
    from cryptography.hazmat.primitives.asymmetric import rsa

    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    private_pem = key.private_bytes(
        serialization.Encoding.PEM,
        serialization.PrivateFormat.PKCS8,
        serialization.NoEncryption(),
    )
    public_pem = key.public_key().public_bytes(
        serialization.Encoding.PEM,
        serialization.PublicFormat.SubjectPublicKeyInfo,
    )
    return private_pem, public_pem.decode()


@pytest.fixture()
def mint_token(rsa_keys):
    """Return a function signing an application token that expires in ``ttl`` seconds."""
    import time

    import jwt

    private_pem, _ = rsa_keys

    def _mint(ttl: int = 3600, **claims: Any) -> str:
        now = int(time.time())
        payload = {"sub": "app", "iat": now, "exp": now + ttl, **claims}
        return jwt.encode(payload, private_pem, algorithm="RS256")

    return _mint
