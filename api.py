# api.py
import os
from concurrent.futures import ThreadPoolExecutor
from functools import lru_cache
from typing import List

print("[API] Booting FastAPI...")

from dotenv import load_dotenv
from fastapi import APIRouter, Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

_loaded = load_dotenv()
print(f"[API] .env loaded: {_loaded}")
print(f"[API] ENV presence -> BASE RPC: {'yes' if os.getenv('WEB3_PROVIDER_BASE') else 'no'}, "
      f"ETH RPC: {'yes' if os.getenv('WEB3_PROVIDER_ETH') else 'no'}, "
      f"REGISTRY_URL: {'yes' if os.getenv('ETHOSCAN_REGISTRY_URL') else 'no'}, "
      f"REGISTRY_FILE: {'yes' if os.getenv('ETHOSCAN_REGISTRY_FILE') else 'no'}")

from ethoscan.core.errors import InvalidAddress
from ethoscan.core.verify import Verifier

app = FastAPI(title="Ethoscan Genesis Score API", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

api = APIRouter(prefix="/api")


@lru_cache(maxsize=1)
def get_verifier() -> Verifier:
    print("[API] building Verifier from environment")
    return Verifier.from_env()


@api.get("/health")
def health():
    return {"ok": True}


@api.get("/verify/{address}")
def verify_address(address: str, verifier: Verifier = Depends(get_verifier)):
    print(f"[API] GET /api/verify/{address} -> start")
    try:
        report = verifier.verify(address)
    except InvalidAddress as e:
        print(f"[API] /verify invalid address={address} -> {e}")
        raise HTTPException(status_code=400, detail=str(e))
    print(f"[API] /verify OK address={report.address} score={report.score} tier={report.tier.value}")
    return report.to_dict()


class BatchJob(BaseModel):
    addresses: List[str]
    concurrency: int = Field(default=2, ge=1, le=8)


@api.post("/batch")
def batch(job: BatchJob, verifier: Verifier = Depends(get_verifier)):
    print(f"[API] POST /api/batch -> count={len(job.addresses)} conc={job.concurrency}")
    if not job.addresses:
        raise HTTPException(status_code=400, detail="addresses list is empty")

    def work(addr: str) -> dict:
        try:
            return verifier.verify(addr).to_dict()
        except InvalidAddress as e:
            print(f"[API][WORK] invalid {addr} -> {e}")
            return {"address": addr, "error": str(e)}

    # map() keeps results in input order
    with ThreadPoolExecutor(max_workers=job.concurrency) as ex:
        out = list(ex.map(work, job.addresses))
    print(f"[API] /batch completed -> {len(out)} results")
    return {"count": len(out), "results": out}


app.include_router(api)
