"""Tests for reading diagnostic reports."""

import pytest

from bplens_core.errors import ConfigError, DiagnosticLoadError
from bplens_core.source import ModelSource, read_diagnostics

REPORT = """\
<?xml version="1.0" encoding="utf-8"?>
<Diagnostics>
  <Items>
    <Diagnostic>
      <DiagnosticType>BestPractices</DiagnosticType>
      <Severity>Warning</Severity>
      <ElementType>AxTable</ElementType>
      <Path>dynamics://Table/CustTable</Path>
      <Moniker>BPErrorTableNoTitleField</Moniker>
      <Message>Table has no title field.</Message>
    </Diagnostic>
    <Diagnostic>
      <DiagnosticType>BestPractices</DiagnosticType>
      <Severity>Informational</Severity>
      <Path>dynamics://Class/Helper</Path>
      <Moniker>BPInfoUnusedMethod</Moniker>
    </Diagnostic>
    <Diagnostic>
      <DiagnosticType>BestPractices</DiagnosticType>
      <Severity>Error</Severity>
      <Path>dynamics://Class/Helper/Method/run</Path>
      <Moniker>BPErrorMethodNotDocumented</Moniker>
      <Message>Method is not documented.</Message>
    </Diagnostic>
  </Items>
</Diagnostics>
"""


@pytest.fixture
def model_root(tmp_path):
    (tmp_path / "Contoso").mkdir()
    (tmp_path / "Contoso" / "BPCheck.xml").write_text(REPORT, encoding="utf-8")
    return tmp_path


class TestReadDiagnostics:
    def test_reads_all_diagnostics_in_order(self, model_root):
        diagnostics = read_diagnostics(model_root / "Contoso" / "BPCheck.xml")

        assert [d.moniker for d in diagnostics] == [
            "BPErrorTableNoTitleField",
            "BPInfoUnusedMethod",
            "BPErrorMethodNotDocumented",
        ]
        first = diagnostics[0]
        assert first.element_type == "AxTable"
        assert first.message == "Table has no title field."
        assert first.justification == ""

    def test_missing_report(self, tmp_path):
        with pytest.raises(DiagnosticLoadError, match="BPCheck.xml doesn't exist in model"):
            read_diagnostics(tmp_path / "BPCheck.xml")

    def test_malformed_report(self, tmp_path):
        path = tmp_path / "BPCheck.xml"
        path.write_text("<Diagnostics><Items>", encoding="utf-8")
        with pytest.raises(DiagnosticLoadError):
            read_diagnostics(path)

    def test_missing_required_field(self, tmp_path):
        path = tmp_path / "BPCheck.xml"
        path.write_text(
            "<Diagnostics><Items><Diagnostic><Severity>Warning</Severity><Path>p</Path>"
            "</Diagnostic></Items></Diagnostics>",
            encoding="utf-8",
        )
        with pytest.raises(DiagnosticLoadError, match="DiagnosticType, Moniker"):
            read_diagnostics(path)

    def test_empty_items(self, tmp_path):
        path = tmp_path / "BPCheck.xml"
        path.write_text("<Diagnostics><Items></Items></Diagnostics>", encoding="utf-8")
        assert read_diagnostics(path) == []


class TestModelSource:
    def test_informational_filtered_out(self, model_root):
        source = ModelSource({"modelpath": str(model_root), "models": [{"name": "Contoso"}]})

        diagnostics = source.load_diagnostics("Contoso")

        assert [d.severity for d in diagnostics] == ["Warning", "Error"]

    def test_list_models(self, model_root):
        source = ModelSource({"modelpath": str(model_root), "models": [{"name": "Contoso"}, {"name": "Other"}]})
        assert source.list_models() == ["Contoso", "Other"]

    def test_unknown_model_directory(self, model_root):
        source = ModelSource({"modelpath": str(model_root), "models": []})
        with pytest.raises(ConfigError):
            source.load_diagnostics("Missing")

    def test_suppressions_path(self, model_root):
        source = ModelSource({"modelpath": str(model_root), "models": [{"name": "Contoso"}]})
        assert source.suppressions_path("Contoso").name == "Contoso_BPSuppressions.xml"
