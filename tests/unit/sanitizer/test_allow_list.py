"""Unit tests for allow-list loading and the sanitize context."""

import pytest

from payload_guard.models import PathFilterConfig, SanitizePolicy
from payload_guard.sanitizer.allow_list import AllowList, SanitizeContext, load_allow_list_entries
from payload_guard.sanitizer.exceptions import AllowListLoadError, ConfigurationError


class TestLoadAllowListEntries:
    """Test reading the allow-list file."""

    def test_reads_json_array(self, write_allow_list):
        path = write_allow_list(["COD_PROPOSTA", "data.set0[].STA_PAGO"])
        assert load_allow_list_entries(path) == ["COD_PROPOSTA", "data.set0[].STA_PAGO"]

    def test_missing_file(self, tmp_path):
        with pytest.raises(AllowListLoadError) as exc_info:
            load_allow_list_entries(tmp_path / "missing.json")
        assert "path" in exc_info.value.details

    def test_invalid_json(self, write_allow_list):
        path = write_allow_list("[not json")
        with pytest.raises(AllowListLoadError) as exc_info:
            load_allow_list_entries(path)
        assert "line 1" in exc_info.value.details["reason"]

    def test_not_an_array(self, write_allow_list):
        path = write_allow_list({"fields": ["a"]})
        with pytest.raises(AllowListLoadError):
            load_allow_list_entries(path)

    def test_is_configuration_error(self, tmp_path):
        with pytest.raises(ConfigurationError):
            AllowList.from_file(tmp_path / "missing.json")


class TestAllowList:
    """Test field and path entries."""

    def test_fields_normalized(self):
        allow = AllowList(["COD_PROPOSTA", "Código"])
        assert allow.fields == frozenset({"codproposta", "codigo"})
        assert allow.allows("codproposta", "anywhere.COD_PROPOSTA")

    def test_path_entries(self):
        allow = AllowList(["data.set0[].STA_PAGO"])
        assert allow.path_patterns == ("data.set0[].STA_PAGO",)
        assert allow.allows("stapago", "data.set0[3].STA_PAGO")
        assert not allow.allows("stapago", "data.set1[3].STA_PAGO")

    def test_blank_entries_ignored(self):
        assert len(AllowList(["", "  ", "a"])) == 1

    def test_from_file(self, write_allow_list):
        allow = AllowList.from_file(write_allow_list(["mensagem", "a.b"]))
        assert len(allow) == 2


class TestSanitizeContext:
    """Test the immutable context."""

    def test_build_from_plain_entries(self):
        context = SanitizeContext.build(SanitizePolicy.preset("delete_on_deny"), ["mensagem"])
        assert context.is_allowed("mensagem", "mensagem")
        assert not context.is_allowed("outro", "outro")

    def test_markers_normalized(self):
        policy = SanitizePolicy.preset("delete_on_deny", sensitive_markers=("API_KEY",))
        context = SanitizeContext.build(policy)
        assert context.sensitive_markers == ("apikey",)
        assert context.is_sensitive_name("xapikeyx")

    def test_allow_markers_and_prefixes(self):
        context = SanitizeContext.build(SanitizePolicy.preset("strip_noise"))
        assert context.is_allowed("statuspagamento", "x")
        assert context.is_allowed("codcliente", "x")
        assert not context.is_allowed("nomcliente", "x")
        assert not context.is_allowed("", "x")

    def test_path_filter_compiled(self):
        context = SanitizeContext.build(
            SanitizePolicy.preset("delete_on_deny"),
            path_filter=PathFilterConfig(keep_paths=("data.set0",), drop_paths=("data.set0[].X",)),
        )
        assert context.keep_paths.matches("data.set0")
        assert context.drop_paths.matches("data.set0[1].X")

    def test_frozen(self):
        context = SanitizeContext.build(SanitizePolicy.preset("delete_on_deny"))
        with pytest.raises(AttributeError):
            context.policy = None
