import pytest
from pydantic import ValidationError

from pkceflow.models.flow import FlowMeta, MetaSaveResult, has_code_verifier


class TestFlowMeta:
    def test_storage_record_uses_camel_case_verifier(self) -> None:
        # Arrange
        meta = FlowMeta(code_verifier="v" * 43, state="xyz", nonce="n-1")

        # Act
        record = meta.to_storage()

        # Assert
        assert record == {"codeVerifier": "v" * 43, "state": "xyz", "nonce": "n-1"}

    def test_from_storage_round_trips_extra_params(self) -> None:
        # Arrange
        record = {"codeVerifier": "abc", "redirect_uri": "https://app/cb"}

        # Act
        meta = FlowMeta.from_storage(record)

        # Assert
        assert meta is not None
        assert meta.code_verifier == "abc"
        assert meta.flow_params == {"redirect_uri": "https://app/cb"}

    def test_from_storage_accepts_snake_case_key(self) -> None:
        # Act
        meta = FlowMeta.from_storage({"code_verifier": "abc"})

        # Assert
        assert meta is not None
        assert meta.code_verifier == "abc"

    @pytest.mark.parametrize("record", [{}, {"codeVerifier": ""}, {"state": "xyz"}])
    def test_from_storage_without_verifier_returns_none(self, record) -> None:
        assert FlowMeta.from_storage(record) is None

    def test_empty_verifier_is_rejected(self) -> None:
        with pytest.raises(ValidationError):
            FlowMeta(code_verifier="")

    def test_has_code_verifier_handles_missing_record(self) -> None:
        assert not has_code_verifier(None)
        assert has_code_verifier({"codeVerifier": "x"})


class TestMetaSaveResult:
    def test_no_existing_tiers_means_no_hazard(self) -> None:
        assert not MetaSaveResult().hazard_detected

    def test_existing_tiers_signal_hazard(self) -> None:
        result = MetaSaveResult(existing_tiers=("durable",))

        assert result.hazard_detected
