from pathlib import Path
import pytest
from cafeplatform.adapters.csv_training_corpus import CsvTrainingCorpus
from cafeplatform.contracts.core import CoverClass
from cafeplatform.contracts.errors import CorpusFormatError, ModelUnavailableError

def _write(tmp_path: Path, text: str) -> Path:
    p = tmp_path / "puntos.csv"
    p.write_text(text, encoding="utf-8")
    return p

def test_reads_explicit_column_and_labels(tmp_path: Path):
    p = _write(tmp_path, "id,clase,valor_banda\n1,cafe,0.81\n2, Cafe ,0.77\n3,pasto,0.21\n4,,0.3\n")
    out = CsvTrainingCorpus(p).read_samples()
    assert [s.value for s in out] == [0.81, 0.77, 0.21, 0.3]
    assert [s.label for s in out] == [CoverClass.TARGET, CoverClass.TARGET, CoverClass.OTHER, CoverClass.OTHER]

def test_candidate_order_prefers_valor_banda(tmp_path: Path):
    p = _write(tmp_path, "clase,value,valor_banda\ncafe,9,0.5\n")
    assert CsvTrainingCorpus(p).read_samples()[0].value == 0.5

def test_header_match_is_case_insensitive(tmp_path: Path):
    p = _write(tmp_path, "CLASE, Valor \ncafe,0.4\n")
    out = CsvTrainingCorpus(p).read_samples()
    assert out[0].value == 0.4 and out[0].label is CoverClass.TARGET

def test_fallback_first_numeric_column_skips_ids(tmp_path: Path):
    p = _write(tmp_path, "orig_fid,id_muestra,clase,nombre,ndvi\n10,20,cafe,lote a,0.66\n11,21,otro,lote b,0.12\n")
    assert [s.value for s in CsvTrainingCorpus(p).read_samples()] == [0.66, 0.12]

def test_non_finite_rows_are_dropped(tmp_path: Path):
    p = _write(tmp_path, "clase,valor_banda\ncafe,0.8\ncafe,\ncafe,abc\notro,inf\notro,0.1\n")
    assert [s.value for s in CsvTrainingCorpus(p).read_samples()] == [0.8, 0.1]

def test_configured_feature_column(tmp_path: Path):
    p = _write(tmp_path, "clase,valor_banda,b8\ncafe,0.8,1200\n")
    assert CsvTrainingCorpus(p, feature_column="B8").read_samples()[0].value == 1200.0
    with pytest.raises(CorpusFormatError):
        CsvTrainingCorpus(p, feature_column="b11").read_samples()

def test_custom_label_column_and_target(tmp_path: Path):
    p = _write(tmp_path, "cultivo,valor\ncoffee,0.8\nbanana,0.4\n")
    out = CsvTrainingCorpus(p, label_column="cultivo", target_label="coffee").read_samples()
    assert [s.label for s in out] == [CoverClass.TARGET, CoverClass.OTHER]

def test_header_only_and_empty_file(tmp_path: Path):
    assert CsvTrainingCorpus(_write(tmp_path, "clase,valor_banda\n")).read_samples() == []
    assert CsvTrainingCorpus(_write(tmp_path, "")).read_samples() == []

def test_missing_file(tmp_path: Path):
    corpus = CsvTrainingCorpus(tmp_path / "nope.csv")
    assert not corpus.exists()
    with pytest.raises(ModelUnavailableError):
        corpus.read_samples()
