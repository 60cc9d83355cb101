from PIL import Image

from core.delivery import DeliveryGateway
from core.export_settings import ExportOptions, ImageFormat
from core.output_encoder import EncodedImage, OutputEncoder


def _encoded(theme, fmt=ImageFormat.PNG):
    image = Image.new("RGBA", (8, 6), "#336699")
    return OutputEncoder().encode(image, theme, ExportOptions(format=fmt))


def test_save_writes_payload_and_creates_folder(qapp, dark_theme, tmp_path, fake_clipboard) -> None:
    encoded = _encoded(dark_theme)
    folder = tmp_path / "nested" / "out"

    assert DeliveryGateway(lambda: fake_clipboard).save(encoded, folder)
    assert (folder / encoded.file_name).read_bytes() == encoded.payload


def test_save_failure_returns_false(qapp, dark_theme, tmp_path, fake_clipboard) -> None:
    blocker = tmp_path / "not-a-folder"
    blocker.write_text("file")

    assert not DeliveryGateway(lambda: fake_clipboard).save(_encoded(dark_theme), blocker)


def test_clipboard_gets_image(qapp, dark_theme, fake_clipboard) -> None:
    gateway = DeliveryGateway(lambda: fake_clipboard)

    assert gateway.copy_to_clipboard(_encoded(dark_theme))
    assert fake_clipboard.image is not None
    assert fake_clipboard.image.width() == 8
    assert fake_clipboard.text is None


def test_clipboard_falls_back_to_data_url(qapp, dark_theme, clipboard_factory) -> None:
    clipboard = clipboard_factory(fail_image=True)
    encoded = _encoded(dark_theme)

    report = DeliveryGateway(lambda: clipboard).deliver(encoded, save=False)

    assert report.copied
    assert report.copied_as_text
    assert clipboard.text == encoded.data_url
    assert report.status_message == "Copied to clipboard as data URL"


def test_undecodable_payload_copied_as_text(qapp, fake_clipboard) -> None:
    encoded = EncodedImage(
        payload=b"not an image",
        data_url="data:image/png;base64,bm90IGFuIGltYWdl",
        mime_type="image/png",
        file_name="markdown-dark-2024-05-01T12-30-45.png",
        width=1,
        height=1,
    )

    assert DeliveryGateway(lambda: fake_clipboard).copy_to_clipboard(encoded)
    assert fake_clipboard.image is None
    assert fake_clipboard.text == encoded.data_url


def test_missing_clipboard_is_reported_not_raised(qapp, dark_theme, tmp_path) -> None:
    report = DeliveryGateway(lambda: None).deliver(_encoded(dark_theme), folder=tmp_path)

    assert report.saved
    assert report.copied is False
    assert not report.all_succeeded
    assert report.status_message == "Saved but clipboard failed"


def test_both_sinks_fail_independently(qapp, dark_theme, tmp_path, clipboard_factory) -> None:
    blocker = tmp_path / "blocked"
    blocker.write_text("x")
    clipboard = clipboard_factory(fail_image=True, fail_text=True)

    report = DeliveryGateway(lambda: clipboard).deliver(_encoded(dark_theme), folder=blocker)

    assert report.saved is False
    assert report.copied is False
    assert report.status_message == "Save and clipboard both failed"


def test_full_success_report(qapp, dark_theme, tmp_path, fake_clipboard) -> None:
    encoded = _encoded(dark_theme)

    report = DeliveryGateway(lambda: fake_clipboard).deliver(encoded, folder=tmp_path)

    assert report.all_succeeded
    assert report.saved_path == tmp_path / encoded.file_name
    assert report.status_message == "Image saved & copied to clipboard"
