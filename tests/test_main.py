import json

from PIL import Image

from cardkit.main import main


def test_guides(capsys):
    assert main(["guides"]) == 0
    guides = json.loads(capsys.readouterr().out)
    assert guides["trim"]["left"] == 4.545


def test_snapshot(capsys):
    assert main(["snapshot", "--tournament", "qcn-2026", "--card-type", "rare"]) == 0
    out = json.loads(capsys.readouterr().out)
    assert out["templateId"] == "qcn26"
    assert out["templateSnapshot"]["layout"]["kind"] == "usqc26-v1"


def test_render_with_meta(tmp_path, photo_path, assets_dir, config_data):
    card_path = tmp_path / "card.json"
    card_path.write_text(json.dumps({"id": "card-9", "cardType": "player", "firstName": "Ana", "lastName": "Li"}))
    config_path = tmp_path / "config.json"
    config_path.write_text(json.dumps(config_data))
    out = tmp_path / "out" / "card-9.png"

    code = main([
        "render", str(card_path),
        "--config", str(config_path),
        "--photo", str(photo_path),
        "--assets", str(assets_dir),
        "--out", str(out),
        "--mode", "trim",
        "--meta",
    ])
    assert code == 0
    assert Image.open(out).size == (750, 1050)
    meta = json.loads(out.with_suffix(".json").read_text())
    assert meta["key"] == "card-9.png"
    assert meta["templateId"] == "usqc26"


def test_render_crop(tmp_path, photo_path):
    card_path = tmp_path / "card.json"
    card_path.write_text(json.dumps({
        "cardType": "rare",
        "photo": {"crop": {"x": 0, "y": 0, "w": 0.5, "h": 0.5, "rotateDeg": 0}},
    }))
    out = tmp_path / "crop.png"
    assert main(["render", str(card_path), "--photo", str(photo_path), "--mode", "crop", "--out", str(out)]) == 0
    assert Image.open(out).size == (200, 150)


def test_render_reports_bad_input(tmp_path, photo_path):
    card_path = tmp_path / "card.json"
    card_path.write_text(json.dumps({"cardType": "mascot"}))
    assert main(["render", str(card_path), "--photo", str(photo_path), "--tournament", "usqc-2026"]) == 1


def test_render_reports_missing_photo(tmp_path):
    card_path = tmp_path / "card.json"
    card_path.write_text(json.dumps({"cardType": "player"}))
    code = main([
        "render", str(card_path),
        "--photo", str(tmp_path / "missing.png"),
        "--tournament", "usqc-2026",
        "--out", str(tmp_path / "never.png"),
    ])
    assert code == 1
    assert not (tmp_path / "never.png").exists()


def test_preview(tmp_path):
    out = tmp_path / "preview.png"
    assert main(["preview", "--tournament", "qcn-2026", "--card-type", "rare", "--mode", "full", "--out", str(out)]) == 0
    assert Image.open(out).size == (825, 1125)


def test_render_reports_crop_past_the_image_edge(tmp_path, photo_path):
    card_path = tmp_path / "card.json"
    card_path.write_text(json.dumps({
        "cardType": "player",
        "photo": {"crop": {"x": 0.8, "y": 0.9, "w": 0.5, "h": 0.5, "rotateDeg": 0}},
    }))
    out = tmp_path / "never.png"
    code = main(["render", str(card_path), "--photo", str(photo_path), "--tournament", "usqc-2026", "--out", str(out)])
    assert code == 1
    assert not out.exists()
