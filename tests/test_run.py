# SPDX-License-Identifier: MIT
"""End-to-end migration run against a mocked record store."""

from __future__ import annotations

import json

import httpx
import pytest
import respx

from runtime.settings import Settings
from tasks.run import run_migration


def _settings(**overrides) -> Settings:
    values = {
        "song_host": "https://song.test",
        "ego_host": "https://ego.test",
        "ego_client_id": "app-id",
        "ego_client_secret": "app-secret",
        "song_page_size": 10,
    }
    values.update(overrides)
    return Settings(**values)


@pytest.mark.asyncio()
async def test_run_requires_credentials() -> None:
    with pytest.raises(RuntimeError, match="no Application Credentials"):
        await run_migration(_settings(ego_client_id=""))


@pytest.mark.asyncio()
@respx.mock
async def test_run_migrates_each_study(rsa_keys, mint_token, make_record) -> None:
    _, public_pem = rsa_keys
    respx.get("https://ego.test/oauth/token/public_key").mock(
        return_value=httpx.Response(200, text=public_pem)
    )
    respx.route(method="POST", host="ego.test", path="/oauth/token").mock(
        return_value=httpx.Response(200, json={"access_token": mint_token()})
    )
    respx.get("https://song.test/studies/all").mock(
        return_value=httpx.Response(200, json=["S1", "S2", "S3"])
    )
    record = make_record(
        12,
        study_id="S1",
        analysis_id="A1",
        experiment={"purpose_of_sequencing": "Surveillance"},
        sample_collection={"anatomical_part": "Nasopharynx"},
    )
    respx.route(method="GET", host="song.test", path="/studies/S1/analysis/paginated").mock(
        return_value=httpx.Response(
            200,
            json={"totalAnalyses": 1, "currentTotalAnalyses": 1, "analyses": [record]},
        )
    )
    respx.route(method="GET", host="song.test", path="/studies/S2/analysis/paginated").mock(
        return_value=httpx.Response(503, text="unavailable")
    )
    update = respx.put("https://song.test/studies/S1/analysis/A1").mock(
        return_value=httpx.Response(200, json={})
    )

    summaries = await run_migration(_settings(studies=["S1", "S2"]))

    assert [summary.study for summary in summaries] == ["S1", "S2"]
    assert summaries[0].completed is True
    assert summaries[0].counts.successful == 1
    assert summaries[1].completed is False
    sent = json.loads(update.calls.last.request.content)
    assert sent["analysisType"] == {"name": "consensus_sequence", "version": 13}
    assert sent["experiment"]["purpose_of_sequencing"] == ["Surveillance"]
    assert "analysisId" not in sent


@pytest.mark.asyncio()
@respx.mock
async def test_run_fails_when_studies_cannot_be_listed() -> None:
    respx.get("https://song.test/studies/all").mock(
        return_value=httpx.Response(500, text="boom")
    )
    with pytest.raises(RuntimeError, match="Unable to retrieve studies"):
        await run_migration(_settings())
