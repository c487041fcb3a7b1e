"""Tests for the stdin/stdout predictor bridge."""

import asyncio
import sys

import pytest

from liars_dice.strategy.external.bridge import PredictorConfig, PredictorError
from liars_dice.strategy.external.subprocess_predictor import SubprocessPredictorBridge

_MESSAGES = [
    {"role": "system", "content": "be a bot"},
    {"role": "user", "content": "your move"},
]


def _bridge(script: str, timeout: float = 10.0, **kwargs) -> SubprocessPredictorBridge:
    config = PredictorConfig(
        command=(sys.executable, "-c", script),
        timeout_seconds=timeout,
        **kwargs,
    )
    return SubprocessPredictorBridge(config)


class TestIsAvailable:
    def test_absolute_executable(self):
        assert _bridge("pass").is_available()

    def test_missing_program_on_path(self):
        config = PredictorConfig(command=("definitely-not-installed-predictor",))
        assert not SubprocessPredictorBridge(config).is_available()

    def test_missing_absolute_path(self, tmp_path):
        config = PredictorConfig(command=(str(tmp_path / "missing"),))
        assert not SubprocessPredictorBridge(config).is_available()

    def test_not_executable(self, tmp_path):
        script = tmp_path / "relay.sh"
        script.write_text("echo hi\n")
        script.chmod(0o644)
        config = PredictorConfig(command=(str(script),))
        assert not SubprocessPredictorBridge(config).is_available()


class TestPredict:
    def test_result_envelope(self):
        bridge = _bridge(
            "import json, sys\n"
            "payload = json.load(sys.stdin)\n"
            "print(json.dumps({'result': payload['messages'][1]['content']}))\n"
        )
        assert asyncio.run(bridge.predict(_MESSAGES)) == "your move"

    def test_plain_text_reply(self):
        bridge = _bridge("print('{\"action\": \"challenge\"}')")
        assert asyncio.run(bridge.predict(_MESSAGES)) == '{"action": "challenge"}'

    def test_model_and_options_sent(self):
        bridge = _bridge(
            "import json, sys\n"
            "payload = json.load(sys.stdin)\n"
            "print(payload['model'] + ' ' + payload['temperature'])\n",
            model="tiny",
            extra_options={"temperature": "0.1"},
        )
        assert asyncio.run(bridge.predict(_MESSAGES)) == "tiny 0.1"

    def test_nonzero_exit_raises(self):
        bridge = _bridge("import sys; sys.stderr.write('bad key'); sys.exit(3)")
        with pytest.raises(PredictorError, match="code 3"):
            asyncio.run(bridge.predict(_MESSAGES))

    def test_timeout_raises(self):
        bridge = _bridge("import time; time.sleep(5)", timeout=0.2)
        with pytest.raises(PredictorError, match="timed out"):
            asyncio.run(bridge.predict(_MESSAGES))

    def test_missing_program_raises(self, tmp_path):
        config = PredictorConfig(command=(str(tmp_path / "missing"),))
        with pytest.raises(PredictorError):
            asyncio.run(SubprocessPredictorBridge(config).predict(_MESSAGES))


class TestUnwrap:
    def test_envelope(self):
        assert SubprocessPredictorBridge._unwrap('{"result": "hi"}') == "hi"

    def test_non_envelope_json_kept(self):
        text = '{"action": "challenge"}'
        assert SubprocessPredictorBridge._unwrap(text) == text

    def test_non_string_result_kept(self):
        text = '{"result": 4}'
        assert SubprocessPredictorBridge._unwrap(text) == text

    def test_plain_text(self):
        assert SubprocessPredictorBridge._unwrap("challenge") == "challenge"
