"""
Unit tests for base58 keys and program-owned address derivation.

Golden addresses were computed independently and are recorded here as fixtures.
"""

import hashlib

import pytest

import miya_sdk.core.address as address_mod
from miya_sdk.core.address import (
    MAX_SEEDS,
    SYSTEM_PROGRAM_ID,
    TOKEN_PROGRAM_ID,
    b58decode,
    b58encode,
    create_program_address,
    find_bridge_address,
    find_chain_address,
    find_pool_address,
    find_program_address,
    find_token_pair_address,
    is_on_curve,
    is_valid_pubkey,
    to_pubkey_bytes,
    validate_pubkey,
)
from miya_sdk.core.errors import (
    AddressError,
    InvalidFieldError,
    InvalidLengthError,
    InvalidSeedsError,
    NoValidAddressError,
)

from conftest import BRIDGE_PROGRAM_ID, MIXER_PROGRAM_ID, ZERO_MINT


# --- Base58 ---

class TestBase58:

    def test_leading_zero_bytes_map_to_ones(self):
        assert b58encode(b"\x00" * 32) == "1" * 32
        assert b58decode("1" * 32) == b"\x00" * 32

    def test_round_trip(self):
        raw = bytes(range(32))
        assert b58decode(b58encode(raw)) == raw

    def test_known_program_ids(self):
        assert validate_pubkey(SYSTEM_PROGRAM_ID) == b"\x00" * 32
        assert len(validate_pubkey(TOKEN_PROGRAM_ID)) == 32

    def test_invalid_character(self):
        # '0', 'O', 'I', 'l' are not in the alphabet
        with pytest.raises(AddressError):
            b58decode("0OIl")

    def test_wrong_length_key(self):
        # one '1' too many decodes to 33 bytes
        assert not is_valid_pubkey("Mixer111111111111111111111111111111111111111")
        assert is_valid_pubkey(MIXER_PROGRAM_ID)

    def test_to_pubkey_bytes_errors(self):
        with pytest.raises(InvalidFieldError):
            to_pubkey_bytes("not-base58!", "token_mint")
        with pytest.raises(InvalidLengthError):
            to_pubkey_bytes(b"\x01" * 31, "token_mint")


# --- create_program_address / find_program_address ---

class TestDerivation:

    def test_reference_vector(self):
        # widely published example: seed "helloWorld" under the system program
        address, bump = find_program_address([b"helloWorld"], SYSTEM_PROGRAM_ID)
        assert address == "46GZzzetjCURsdFPb7rcnspbEMnCBXe9kpjrsZAkKb6X"
        assert bump == 254

    def test_first_off_curve_bump_is_chosen(self):
        # bump 255 lands on the curve here, so 254 is canonical
        candidate = hashlib.sha256(
            b"helloWorld" + b"\xff" + b"\x00" * 32 + b"ProgramDerivedAddress"
        ).digest()
        assert b58encode(candidate) == "7aGCrjwMFDLq92oeSwfADozP7RNk5Rkqoz2ESFUZAT3b"
        assert is_on_curve(candidate)
        with pytest.raises(InvalidSeedsError):
            create_program_address([b"helloWorld", b"\xff"], SYSTEM_PROGRAM_ID)

        raw = create_program_address([b"helloWorld", b"\xfe"], SYSTEM_PROGRAM_ID)
        assert b58encode(raw) == "46GZzzetjCURsdFPb7rcnspbEMnCBXe9kpjrsZAkKb6X"
        assert not is_on_curve(raw)

    def test_deterministic(self):
        first = find_program_address([b"miya_bridge"], BRIDGE_PROGRAM_ID)
        second = find_program_address([b"miya_bridge"], BRIDGE_PROGRAM_ID)
        assert first == second

    def test_program_id_changes_address(self):
        a, _ = find_program_address([b"miya_bridge"], BRIDGE_PROGRAM_ID)
        b, _ = find_program_address([b"miya_bridge"], MIXER_PROGRAM_ID)
        assert a != b

    def test_raw_program_id_accepted(self):
        by_str = find_program_address([b"helloWorld"], SYSTEM_PROGRAM_ID)
        by_bytes = find_program_address([b"helloWorld"], b"\x00" * 32)
        assert by_str == by_bytes

    def test_too_many_seeds(self):
        with pytest.raises(InvalidLengthError):
            find_program_address([b"x"] * MAX_SEEDS, SYSTEM_PROGRAM_ID)

    def test_oversized_seed(self):
        with pytest.raises(InvalidLengthError):
            find_program_address([b"x" * 33], SYSTEM_PROGRAM_ID)

    def test_exhausted_bump_search(self, monkeypatch):
        monkeypatch.setattr(address_mod, "is_on_curve", lambda candidate: True)
        with pytest.raises(NoValidAddressError):
            find_program_address([b"miya_bridge"], BRIDGE_PROGRAM_ID)

    def test_bump_zero_is_reachable(self, monkeypatch):
        calls = []

        def only_last_is_off_curve(candidate):
            calls.append(candidate)
            return len(calls) < 256

        monkeypatch.setattr(address_mod, "is_on_curve", only_last_is_off_curve)
        _, bump = find_program_address([b"miya_bridge"], BRIDGE_PROGRAM_ID)
        assert bump == 0
        assert len(calls) == 256


# --- MIYA seed families ---

class TestMiyaAddresses:

    def test_pool_golden(self):
        address, bump = find_pool_address(MIXER_PROGRAM_ID, ZERO_MINT, 1_000_000_000)
        assert address == "BHrE4moddYfnhXq2vLMUgHiK1eqAQj8UTAZ6RHdhhyzH"
        assert bump == 255

    def test_pool_depends_on_amount_and_mint(self):
        other_amount, _ = find_pool_address(MIXER_PROGRAM_ID, ZERO_MINT, 2_000_000_000)
        assert other_amount == "GE3AojTWvQcwxt9PDA1C5f1f5SsTViLyhZeZUCFNnXGU"
        other_mint, _ = find_pool_address(MIXER_PROGRAM_ID, b"\x07" * 32, 1_000_000_000)
        assert other_mint == "BTL897c6fcWUxk72hA7ZuF1A6A3XHX8xvMFELDaoWQ5g"

    def test_pool_amount_is_little_endian(self):
        expected = find_program_address(
            [b"miya_pool", b"\x00" * 32, (1_000_000_000).to_bytes(8, "little")],
            MIXER_PROGRAM_ID,
        )
        assert find_pool_address(MIXER_PROGRAM_ID, ZERO_MINT, 1_000_000_000) == expected

    def test_bridge_golden(self):
        assert find_bridge_address(BRIDGE_PROGRAM_ID) == (
            "6isKTfrDShsXAPHoUMoawjbSFWBpenruYCSrDpGH1U4U", 251,
        )

    @pytest.mark.parametrize("chain_id,expected,bump", [
        (0, "Hu7AQuPwe8StgbQvV84J9xAMwb7aSsop1ZbCAEmhJtZK", 254),
        (1, "A5pky9tirL5HzFpu6jq8bWfYXTfZadzJModaRzi7qD9H", 255),
        (65535, "9cMwQoUoe53c1kJZQ5kz2FakUCoY4QyQ9sKn9UFu4eUL", 254),
    ])
    def test_chain_golden(self, chain_id, expected, bump):
        assert find_chain_address(BRIDGE_PROGRAM_ID, chain_id) == (expected, bump)

    def test_chain_id_out_of_range(self):
        with pytest.raises(InvalidFieldError):
            find_chain_address(BRIDGE_PROGRAM_ID, 65536)

    def test_token_pair_golden(self):
        assert find_token_pair_address(BRIDGE_PROGRAM_ID, 1, 2, ZERO_MINT) == (
            "GHfCw1V9qGQ96Wq9CfU4wTGag14pmBio6vU4Gd74HWce", 254,
        )

    def test_token_pair_is_directional(self):
        forward, _ = find_token_pair_address(BRIDGE_PROGRAM_ID, 1, 2, ZERO_MINT)
        backward, _ = find_token_pair_address(BRIDGE_PROGRAM_ID, 2, 1, ZERO_MINT)
        assert forward != backward
