"""
Root Verifier Config Unit Tests
===============================

[CONFIG] Mapping / environment parsing and verifier construction.
"""

import pytest

CONTRACT = "0x" + "ab" * 20


class TestFromMapping:

    def test_contract_defaults(self):
        from zkverifier.root import RootVerifierConfig, RootVerifierKind

        config = RootVerifierConfig.from_mapping({"rpc": "http://localhost:8545", "contract": CONTRACT})

        assert config.kind is RootVerifierKind.CONTRACT
        assert config.rpc_url == "http://localhost:8545"
        assert config.request_timeout == 5.0
        assert config.cache_expiration == 10.0
        assert not config.disabled

    def test_disabled_shortcut_ignores_other_keys(self):
        from zkverifier.root import RootVerifierConfig, RootVerifierKind

        config = RootVerifierConfig.from_mapping({"disabled": True, "request_timeout": "garbage"})

        assert config.disabled
        assert config.kind is RootVerifierKind.DISABLED

    def test_rpc_required(self):
        from zkverifier.errors import ConfigurationError
        from zkverifier.root import RootVerifierConfig

        with pytest.raises(ConfigurationError, match="rpc is required"):
            RootVerifierConfig.from_mapping({"contract": CONTRACT})

    def test_unsupported_kind(self):
        from zkverifier.errors import ConfigurationError
        from zkverifier.root import RootVerifierConfig

        with pytest.raises(ConfigurationError, match="unsupported verifier type"):
            RootVerifierConfig.from_mapping({"rpc": "http://x"}, kind="oracle")

    def test_durations(self):
        from zkverifier.root import RootVerifierConfig

        config = RootVerifierConfig.from_mapping({
            "kind": "cached",
            "rpc": "http://x",
            "request_timeout": "2s",
            "cache_expiration": 30,
            "from_block": "1200",
        })

        assert config.request_timeout == 2.0
        assert config.cache_expiration == 30.0
        assert config.from_block == 1200

    def test_invalid_duration(self):
        from zkverifier.errors import ConfigurationError
        from zkverifier.root import RootVerifierConfig

        with pytest.raises(ConfigurationError, match="request_timeout"):
            RootVerifierConfig.from_mapping({"rpc": "http://x", "request_timeout": "soon"})


class TestFromEnv:

    def test_reads_prefixed_variables(self, monkeypatch):
        from zkverifier.root import RootVerifierConfig, RootVerifierKind

        monkeypatch.setenv("PASSPORT_ROOT_RPC_URL", "http://node:8545")
        monkeypatch.setenv("PASSPORT_ROOT_CONTRACT", CONTRACT)
        monkeypatch.setenv("PASSPORT_ROOT_CACHE_EXPIRATION", "15")

        config = RootVerifierConfig.from_env("passport_root", kind=RootVerifierKind.CACHED)

        assert config.rpc_url == "http://node:8545"
        assert config.contract == CONTRACT
        assert config.cache_expiration == 15.0

    def test_disabled(self, monkeypatch):
        from zkverifier.root import RootVerifierConfig

        monkeypatch.setenv("POLL_ROOT_DISABLED", "true")

        assert RootVerifierConfig.from_env("POLL_ROOT").disabled


class TestBuild:

    @pytest.mark.parametrize("kind, cls_name", [
        ("contract", "ContractRootVerifier"),
        ("cached", "CachedRootVerifier"),
        ("events", "EventsRootVerifier"),
    ])
    def test_kinds(self, fake_ledger, kind, cls_name):
        from zkverifier import root

        config = root.RootVerifierConfig.from_mapping({"kind": kind, "rpc": "http://x", "request_timeout": 3})
        verifier = config.build(ledger=fake_ledger)

        try:
            assert type(verifier).__name__ == cls_name
            assert verifier.timeout == 3.0
            assert verifier.ledger is fake_ledger
        finally:
            verifier.close()

    def test_disabled(self):
        from zkverifier.root import DisabledRootVerifier, RootVerifierConfig

        assert isinstance(RootVerifierConfig(disabled=True).build(), DisabledRootVerifier)

    def test_each_build_owns_its_instance(self, fake_ledger):
        from zkverifier.root import RootVerifierConfig

        config = RootVerifierConfig.from_mapping({"kind": "cached", "rpc": "http://x"})
        one, another = config.build(ledger=fake_ledger), config.build(ledger=fake_ledger)

        try:
            assert one is not another
        finally:
            one.close()
            another.close()

    def test_invalid_contract_address(self):
        from zkverifier.errors import ConfigurationError
        from zkverifier.root import RootVerifierConfig

        config = RootVerifierConfig.from_mapping({"rpc": "http://localhost:8545", "contract": "0x1234"})

        with pytest.raises(ConfigurationError, match="invalid hex address"):
            config.build()
