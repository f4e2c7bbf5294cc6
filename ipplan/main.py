# main.py
from fastapi import FastAPI, File, HTTPException, UploadFile
from fastapi.responses import FileResponse
from pathlib import Path, PurePath
from pydantic import BaseModel, ConfigDict, Field
import logging, shutil, uuid

from ipplan import config, csv_rows, planner
from ipplan.errors import InvalidCsv, MalformedRegistry, PoolExhausted, RegistryConflict
from ipplan.models import StationConfig
from ipplan.store import RangeStore

app = FastAPI(title="IP Addressing Generator")

logger = logging.getLogger("uvicorn")


class GenerateIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    file_id: str = Field(alias="fileId")
    lpr_enabled: bool = Field(default=False, alias="lprEnabled")
    red_light_enabled: bool = Field(default=False, alias="redLightEnabled")


def _registry() -> RangeStore:
    return RangeStore(config.REGISTRY_FILE)


def _upload_dir(file_id: str) -> Path:
    try:
        file_id = uuid.UUID(hex=file_id).hex
    except ValueError:
        raise HTTPException(400, "Plik nie istnieje")
    return Path(config.UPLOAD_DIR) / file_id


def _read_text(raw: bytes) -> str:
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError:
        raise HTTPException(400, "Plik musi być zapisany w UTF-8")


@app.post("/api/summary")
async def api_summary(file: UploadFile = File(...)):
    original_name = PurePath(file.filename or "").name
    text = _read_text(await file.read())
    try:
        csv_rows.validate_csv(text, original_name)
    except InvalidCsv as exc:
        raise HTTPException(400, str(exc))

    file_id = uuid.uuid4().hex
    target = Path(config.UPLOAD_DIR) / file_id
    target.mkdir(parents=True, exist_ok=True)
    (target / original_name).write_text(text, encoding="utf-8")

    summary = csv_rows.summary_rows(text)
    logger.info("Summary for %s: %d rows, %d included", original_name, len(summary), sum(r.included for r in summary))
    return {"summary": [r.model_dump() for r in summary], "fileId": file_id}


@app.post("/api/generate")
def api_generate(req: GenerateIn):
    upload = _upload_dir(req.file_id)
    files = sorted(upload.glob("*.csv")) if upload.is_dir() else []
    if not files:
        raise HTTPException(400, "Plik nie istnieje")
    source = files[0]

    rows = csv_rows.parse_rows(source.read_text(encoding="utf-8"))
    out_name = csv_rows.output_file_name(source.name)
    station = StationConfig(lpr_enabled=req.lpr_enabled, red_light_enabled=req.red_light_enabled)
    try:
        result = planner.allocate_and_assign(rows, _registry(), out_name, station=station)
    except PoolExhausted as exc:
        logger.warning("Generate failed for %s: %s", source.name, exc)
        raise HTTPException(409, f"Błąd generacji adresacji: {exc}")
    except (MalformedRegistry, RegistryConflict) as exc:
        logger.exception("Registry error while generating %s", source.name)
        raise HTTPException(500, f"Błąd generacji adresacji: {exc}")

    output_dir = Path(config.OUTPUT_DIR)
    output_dir.mkdir(parents=True, exist_ok=True)
    (output_dir / out_name).write_text(csv_rows.render_assigned_rows(result.rows), encoding="utf-8")
    shutil.rmtree(upload, ignore_errors=True)

    res = result.reservation
    return {
        "fileName": out_name,
        "networkName": csv_rows.network_name(source.name),
        "rows": [r.model_dump() for r in result.rows],
        "network": res.network,
        "mask": res.mask,
        "rangeStart": res.range_start,
        "rangeEnd": res.range_end,
        "stationEquipment": [e.model_dump(by_alias=True) for e in result.equipment],
        "used": result.used,
        "reserve": result.reserve,
        "subnetMask": result.subnet_mask,
        "prefix": result.prefix,
    }


@app.get("/api/download/{file_name}")
async def api_download(file_name: str):
    if PurePath(file_name).name != file_name:
        raise HTTPException(404, "Plik nie istnieje")
    path = Path(config.OUTPUT_DIR) / file_name
    if not path.is_file():
        raise HTTPException(404, "Plik nie istnieje")
    return FileResponse(path, filename=file_name, media_type="text/csv")


@app.get("/api/ranges")
def api_ranges():
    try:
        return [r.model_dump(by_alias=True) for r in _registry().load()]
    except MalformedRegistry as exc:
        logger.exception("Registry unreadable")
        raise HTTPException(500, str(exc))


@app.on_event("startup")
async def startup_event():
    for d in (config.UPLOAD_DIR, config.OUTPUT_DIR):
        Path(d).mkdir(parents=True, exist_ok=True)
    logger.info("Registry at %s", config.REGISTRY_FILE)


def run():
    import uvicorn
    uvicorn.run(app, host=config.HOST, port=config.PORT)
