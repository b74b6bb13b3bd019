"""
Unit tests for ProtocolConfig and MiyaClient wiring.
"""

import pytest
from pydantic import ValidationError

from miya_sdk import MiyaClient, ProtocolConfig
from miya_sdk.core.instructions import OptionalFieldEncoding
from miya_sdk.core.rpc import LedgerRpc

from conftest import BRIDGE_PROGRAM_ID, MIXER_PROGRAM_ID, ZERO_MINT, key


def make_config(**overrides) -> ProtocolConfig:
    fields = dict(mixer_program_id=MIXER_PROGRAM_ID, bridge_program_id=BRIDGE_PROGRAM_ID)
    fields.update(overrides)
    return ProtocolConfig(**fields)


class TestProtocolConfig:

    def test_defaults(self):
        config = make_config()
        assert config.rpc_url == "http://127.0.0.1:8899"
        assert config.commitment == "confirmed"
        assert config.timeout == 15.0
        assert config.withdraw_optional_encoding is OptionalFieldEncoding.BITMASK

    def test_program_ids_required(self):
        with pytest.raises(ValidationError):
            ProtocolConfig(mixer_program_id=MIXER_PROGRAM_ID)

    def test_invalid_program_id(self):
        with pytest.raises(ValidationError):
            make_config(mixer_program_id="Mixer111111111111111111111111111111111111111")

    def test_invalid_commitment(self):
        with pytest.raises(ValidationError):
            make_config(commitment="eventually")

    def test_non_positive_timeout(self):
        with pytest.raises(ValidationError):
            make_config(timeout=0)

    def test_encoding_from_string(self):
        config = make_config(withdraw_optional_encoding="legacy_length")
        assert config.withdraw_optional_encoding is OptionalFieldEncoding.LEGACY_LENGTH


class TestMiyaClient:

    def test_wires_both_programs(self, source, submitter, prover):
        client = MiyaClient(make_config(), source=source, submitter=submitter, prover=prover)
        assert client.mixer.program_id == MIXER_PROGRAM_ID
        assert client.bridge.program_id == BRIDGE_PROGRAM_ID
        assert client.mixer.source is source
        assert client.bridge.submitter is submitter
        assert client.mixer.prover is prover

    def test_encoding_reaches_mixer(self, source):
        client = MiyaClient(
            make_config(withdraw_optional_encoding=OptionalFieldEncoding.LEGACY_LENGTH),
            source=source,
        )
        ix = client.mixer.withdraw(
            ZERO_MINT, 1_000, b"", b"\x05" * 32, key(1), key(2), key(3),
        )
        assert len(ix.data) == 76

    def test_programs_are_independent(self, source):
        client = MiyaClient(make_config(), source=source)
        client.mixer.get_pool_info(ZERO_MINT, 1_000)
        client.bridge.get_bridge_info()
        assert len(set(source.requests)) == 2

    def test_opens_and_closes_ledger_rpc(self):
        with MiyaClient(make_config(rpc_url="http://ledger.test")) as client:
            assert isinstance(client.source, LedgerRpc)
            assert client.source.rpc_url == "http://ledger.test"
        assert client._owned_rpc is None

    def test_caller_source_is_not_closed(self, source):
        client = MiyaClient(make_config(), source=source)
        client.close()
        assert client.source is source
