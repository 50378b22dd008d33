# tests/test_attachments.py

from techflow.services import storage

PDF_BYTES = b"%PDF-1.4\n1 0 obj <<>> endobj\ntrailer <<>>\n%%EOF\n"


def _upload(client, headers, order_id, name="report.pdf", content=PDF_BYTES, mime="application/pdf", **data):
    return client.post(
        f"/api/service-orders/{order_id}/attachments",
        files={"file": (name, content, mime)},
        data=data,
        headers=headers,
    )


def test_upload_and_download(client, auth_headers, make_order):
    order = make_order()
    response = _upload(client, auth_headers, order.id)
    assert response.status_code == 201
    attachment = response.json()
    assert attachment["file_type"] == "document"
    assert attachment["size_bytes"] == len(PDF_BYTES)
    assert attachment["file_path"].startswith(f"service-orders/{order.id}/")
    assert storage.local_path(attachment["file_path"]).exists()

    download = client.get(
        f"/api/service-orders/{order.id}/attachments/{attachment['id']}/download",
        headers=auth_headers,
    )
    assert download.status_code == 200
    assert download.content == PDF_BYTES
    assert download.headers["content-type"] == "application/pdf"


def test_upload_infers_file_type(client, auth_headers, make_order):
    order = make_order()
    image = _upload(client, auth_headers, order.id, "site.png", b"\x89PNG data", "image/png")
    assert image.json()["file_type"] == "image"

    voice = _upload(client, auth_headers, order.id, "note.webm", b"voice", "audio/webm")
    assert voice.json()["file_type"] == "audio"

    explicit = _upload(client, auth_headers, order.id, file_type="image")
    assert explicit.json()["file_type"] == "image"


def test_upload_rejects_bad_files(client, auth_headers, make_order):
    order = make_order()
    assert _upload(client, auth_headers, order.id, "run.exe", b"MZ", "application/x-msdownload").status_code == 400
    assert _upload(client, auth_headers, order.id, "empty.pdf", b"").status_code == 400
    assert _upload(client, auth_headers, order.id, file_type="video").status_code == 400
    assert _upload(client, auth_headers, 999).status_code == 404


def test_list_attachments_filters_by_type(client, auth_headers, make_order):
    order = make_order()
    _upload(client, auth_headers, order.id)
    _upload(client, auth_headers, order.id, "site.png", b"\x89PNG data", "image/png")

    response = client.get(f"/api/service-orders/{order.id}/attachments", headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["pagination"]["total"] == 2

    images = client.get(
        f"/api/service-orders/{order.id}/attachments",
        params={"file_type": "image"},
        headers=auth_headers,
    ).json()
    assert [a["original_filename"] for a in images["data"]] == ["site.png"]

    summary = client.get(f"/api/service-orders/{order.id}", headers=auth_headers).json()
    assert len(summary["attachments"]) == 2


def test_attachment_belongs_to_its_order(client, auth_headers, make_order):
    order = make_order()
    other = make_order()
    attachment_id = _upload(client, auth_headers, order.id).json()["id"]

    response = client.get(
        f"/api/service-orders/{other.id}/attachments/{attachment_id}", headers=auth_headers
    )
    assert response.status_code == 404
    assert response.json()["detail"] == "Attachment not found for this service order"


def test_update_attachment(client, auth_headers, make_order):
    order = make_order()
    attachment_id = _upload(client, auth_headers, order.id).json()["id"]
    url = f"/api/service-orders/{order.id}/attachments/{attachment_id}"

    response = client.put(
        url, json={"file_type": "image", "original_filename": "invoice-scan.pdf"}, headers=auth_headers
    )
    assert response.status_code == 200
    assert response.json()["file_type"] == "image"
    assert response.json()["original_filename"] == "invoice-scan.pdf"

    assert client.put(url, json={"file_type": "video"}, headers=auth_headers).status_code == 400
    assert (
        client.put(url, json={"original_filename": "../etc/passwd"}, headers=auth_headers).status_code
        == 400
    )


def test_delete_attachment_removes_file(client, auth_headers, make_order):
    order = make_order()
    attachment = _upload(client, auth_headers, order.id).json()
    path = storage.local_path(attachment["file_path"])

    response = client.delete(
        f"/api/service-orders/{order.id}/attachments/{attachment['id']}", headers=auth_headers
    )
    assert response.status_code == 200
    assert not path.exists()


def test_deleting_order_removes_stored_files(client, auth_headers, make_order):
    order = make_order()
    attachment = _upload(client, auth_headers, order.id).json()
    path = storage.local_path(attachment["file_path"])

    assert client.delete(f"/api/service-orders/{order.id}", headers=auth_headers).status_code == 200
    assert not path.exists()
