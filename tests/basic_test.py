import importlib
import importlib.metadata as metadata
import builtins
import io

def test_version_fallback(monkeypatch):
    # Force PackageNotFoundError
    monkeypatch.setattr(metadata, "version", lambda _: (_ for _ in ()).throw(metadata.PackageNotFoundError))

    # Fake pyproject.toml content
    fake_toml = b"[project]\nversion = '9.9.9'\n"
    monkeypatch.setattr(builtins, "open", lambda *_: io.BytesIO(fake_toml))

    # Reload the module so the fallback branch executes
    import mensura
    importlib.reload(mensura)

    assert mensura.__version__ == "9.9.9"


def test_public_api_exposes_core_types():
    import mensura

    for name in ("Rational", "Unit", "Measurement", "Dimension", "Primitive"):
        assert hasattr(mensura, name)
    assert mensura.UnitCatalogue.__name__ == "UnitCatalogue"
    assert "UnitCatalogue" in dir(mensura)
