"""
Border Crop — FastAPI Backend
Serves the border crop engine as a REST API.
"""

import os
import uuid
import base64
import io
import tempfile

from fastapi import FastAPI, UploadFile, File, Form, HTTPException
from fastapi.responses import FileResponse, Response
from fastapi.middleware.cors import CORSMiddleware

from PIL import Image

from bordercrop.batch import VALID_EXTS, batch_process, load_image
from bordercrop.core.driver import run
from bordercrop.core.errors import ConfigError, CropError
from bordercrop.core.options import CropOptions
from bordercrop.core.pnm import PnmReader, PnmWriter

# ---------------------------------------------------------------------------
# App Setup
# ---------------------------------------------------------------------------
app = FastAPI(title="Border Crop", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

# Temp storage for uploads and processed files
UPLOAD_DIR = os.path.join(tempfile.gettempdir(), "bordercrop_uploads")
OUTPUT_DIR = os.path.join(tempfile.gettempdir(), "bordercrop_output")
os.makedirs(UPLOAD_DIR, exist_ok=True)
os.makedirs(OUTPUT_DIR, exist_ok=True)


def _make_thumbnail(img_path, max_size=300):
    """Base64 JPEG preview of an image file."""
    with Image.open(img_path) as img:
        preview = img.convert("RGB")
    preview.thumbnail((max_size, max_size), Image.LANCZOS)
    buffer = io.BytesIO()
    preview.save(buffer, format="JPEG", quality=70)
    return base64.b64encode(buffer.getvalue()).decode("ascii")


def _options(background="default", bg_color=None, bg_corner=None, edges="",
             margin=0, closeness=0.0, blank_mode="abort", mode="crop"):
    """CropOptions from form fields; 422 if they do not validate."""
    if edges:
        names = {e.strip() for e in edges.split(",")}
        want_crop = tuple(e in names for e in ("left", "right", "top", "bottom"))
    else:
        want_crop = (True, True, True, True)
    try:
        return CropOptions(background=background, bg_color=bg_color or None,
                           bg_corner=bg_corner or None, want_crop=want_crop,
                           margin=margin, closeness=closeness,
                           blank_mode=blank_mode, mode=mode).validate()
    except ConfigError as e:
        raise HTTPException(status_code=422, detail=str(e))


def _summary(results):
    stats = {}
    for result in results:
        stats[result["status"]] = stats.get(result["status"], 0) + 1

    total = len(results)
    cropped = stats.get("cropped", 0)
    return {
        "total": total,
        "cropped": cropped,
        "unchanged": total - cropped,
        "success_rate": round(cropped / total * 100, 1) if total else 0,
        "stats": stats,
        "results": results,
    }


async def _store_upload(session_dir, upload):
    """Save one uploaded image; None if it is not an image we can crop."""
    filename = os.path.basename(upload.filename)
    if not filename.lower().endswith(VALID_EXTS):
        return None

    content = await upload.read()
    path = os.path.join(session_dir, filename)
    with open(path, "wb") as out:
        out.write(content)

    img = load_image(path)
    if img is None:
        os.remove(path)
        return None

    h, w = img.shape[:2]
    return {
        "filename": filename,
        "width": w,
        "height": h,
        "size_kb": round(len(content) / 1024, 1),
        "thumbnail": _make_thumbnail(path),
    }


# ---------------------------------------------------------------------------
# API Routes
# ---------------------------------------------------------------------------

@app.get("/api/status")
def health_check():
    return {"status": "ok", "engine": "border-scan"}


@app.post("/api/upload")
async def upload_files(files: list[UploadFile] = File(...)):
    """Start a crop session from uploaded images; unreadable files are skipped."""
    session_id = uuid.uuid4().hex[:8]
    session_dir = os.path.join(UPLOAD_DIR, session_id)
    os.makedirs(session_dir)

    uploaded = [entry for entry in [await _store_upload(session_dir, f) for f in files]
                if entry is not None]
    return {"session_id": session_id, "count": len(uploaded), "files": uploaded}


@app.post("/api/crop")
async def crop_files(session_id: str = Form(...),
                     background: str = Form("default"),
                     bg_color: str = Form(""),
                     bg_corner: str = Form(""),
                     edges: str = Form(""),
                     margin: int = Form(0),
                     closeness: float = Form(0.0),
                     blank_mode: str = Form("pass")):
    """
    Border-crop every image of an upload session.
    Each result carries thumbnails of the original and, if saved, the crop.
    """
    options = _options(background, bg_color, bg_corner, edges, margin, closeness, blank_mode)

    session_id = os.path.basename(session_id)
    session_dir = os.path.join(UPLOAD_DIR, session_id)
    if not os.path.isdir(session_dir):
        raise HTTPException(status_code=404, detail="Session not found")

    output_dir = os.path.join(OUTPUT_DIR, session_id)
    results = batch_process(session_dir, output_dir, options)
    for result in results:
        name = result["filename"]
        result["original_thumbnail"] = _make_thumbnail(os.path.join(session_dir, name))
        if result["success"]:
            result["cropped_thumbnail"] = _make_thumbnail(os.path.join(output_dir, name))

    return {"session_id": session_id, **_summary(results)}


@app.get("/api/download/{session_id}/{filename}")
async def download_file(session_id: str, filename: str):
    """Download a single cropped image."""
    file_path = os.path.join(OUTPUT_DIR, os.path.basename(session_id),
                             os.path.basename(filename))
    if not os.path.isfile(file_path):
        raise HTTPException(status_code=404, detail="File not found")
    return FileResponse(file_path, filename=os.path.basename(filename))


@app.post("/api/crop-folder")
async def crop_folder(folder_path: str = Form(...),
                      background: str = Form("default"),
                      bg_color: str = Form(""),
                      bg_corner: str = Form(""),
                      edges: str = Form(""),
                      margin: int = Form(0),
                      closeness: float = Form(0.0),
                      blank_mode: str = Form("pass")):
    """
    Border-crop every image in a folder on the server's disk.
    Output goes to '{folder} - Cropped' beside it.
    """
    options = _options(background, bg_color, bg_corner, edges, margin, closeness, blank_mode)

    if not os.path.isdir(folder_path):
        raise HTTPException(status_code=400, detail=f"Folder not found: {folder_path}")

    output_folder = folder_path.rstrip("/\\") + " - Cropped"
    results = batch_process(folder_path, output_folder, options)
    return {"output_folder": output_folder, **_summary(results)}


@app.post("/api/pnm")
async def crop_pnm(file: UploadFile = File(...),
                   background: str = Form("default"),
                   bg_color: str = Form(""),
                   bg_corner: str = Form(""),
                   edges: str = Form(""),
                   margin: int = Form(0),
                   closeness: float = Form(0.0),
                   blank_mode: str = Form("abort"),
                   mode: str = Form("crop")):
    """
    Crop a Netpbm stream (one or more images).
    Returns the cropped stream, or the report lines for a report mode.
    """
    options = _options(background, bg_color, bg_corner, edges, margin, closeness,
                       blank_mode, mode)

    output = io.BytesIO()
    try:
        count = run(options, PnmReader(io.BytesIO(await file.read())), PnmWriter(output))
    except CropError as e:
        raise HTTPException(status_code=422, detail=str(e))

    media_type = "text/plain" if options.reporting else "image/x-portable-anymap"
    return Response(content=output.getvalue(), media_type=media_type,
                    headers={"X-Image-Count": str(count)})
