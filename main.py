import io
import os
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Literal

from dotenv import load_dotenv
from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse, StreamingResponse
from fastmcp import FastMCP

load_dotenv()

import tools
from exports import to_csv, to_excel, to_json
from formatters import (
    format_activity_history,
    format_transaction_details,
    format_wallet_analysis,
)
from models import ActivityRequest, AnalyzeRequest, HealthResponse
from solana_client import NotFoundError, SolanaRPCError
from utils import InvalidInputError


# ── MCP Server ────────────────────────────────────────────────────────────────

mcp = FastMCP(
    name="Solana Wallet Insights",
    instructions=(
        "Analyzes Solana wallets. Fetch a wallet's recent activity, get a full "
        "analysis with behavioral patterns, inferred DeFi positions and strategy "
        "recommendations, or inspect a single transaction by signature."
    ),
)

mcp.tool(name="fetchWalletActivity")(tools.fetch_wallet_activity)
mcp.tool(name="analyzeWallet")(tools.analyze_wallet)
mcp.tool(name="getTransactionDetails")(tools.get_transaction_details)

mcp_app = mcp.http_app(path="/mcp")


# ── Lifespan ──────────────────────────────────────────────────────────────────


@asynccontextmanager
async def lifespan(app: FastAPI):
    async with mcp_app.lifespan(app):
        print(f"  Solana RPC: {tools.analyzer.client.rpc_url}")
        print("  Solana Wallet Insights ready")
        yield
        print("  Shutting down.")


# ── App ───────────────────────────────────────────────────────────────────────

app = FastAPI(
    title="Solana Wallet Insights",
    description=(
        "Solana wallet analytics: activity history, behavioral pattern detection, "
        "DeFi position inference and risk-profiled strategy recommendations.\n\n"
        "Exposes **MCP** tools (`/mcp`) and **REST** mirrors (`/activity`, "
        "`/analyze`, `/transactions/{signature}`)."
    ),
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


def _http_error(e: Exception) -> HTTPException:
    if isinstance(e, InvalidInputError):
        return HTTPException(status_code=422, detail=str(e))
    if isinstance(e, SolanaRPCError):
        return HTTPException(status_code=502, detail=f"Could not retrieve data: {e}")
    if isinstance(e, NotFoundError):
        return HTTPException(status_code=404, detail=str(e))
    print(f"  [!] request failed: {e!r}")
    return HTTPException(status_code=500, detail=f"Internal error: {e}")


# ── Info ──────────────────────────────────────────────────────────────────────


@app.get("/", tags=["Info"])
def root(request: Request):
    base = str(request.base_url).rstrip("/")
    return {
        "name": "Solana Wallet Insights",
        "version": "1.0.0",
        "tools": ["fetchWalletActivity", "analyzeWallet", "getTransactionDetails"],
        "endpoints": {
            "docs": f"{base}/docs",
            "health": f"{base}/health",
            "activity": f"{base}/activity",
            "analyze": f"{base}/analyze",
            "transaction": f"{base}/transactions/{{signature}}",
            "mcp": f"{base}/mcp",
        },
    }


@app.get("/health", response_model=HealthResponse, tags=["Info"])
def health():
    return HealthResponse(
        status="ok",
        timestamp=datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
    )


# ── Wallet ────────────────────────────────────────────────────────────────────


@app.post("/activity", tags=["Wallet"])
async def wallet_activity(req: ActivityRequest):
    """Fetch recent wallet activity and refresh the cache."""
    try:
        activities = await tools.analyzer.fetch_activity(req.address, req.limit)
    except Exception as e:
        raise _http_error(e)

    address = req.address.strip()
    return {
        "address": address,
        "count": len(activities),
        "activities": [a.model_dump() for a in activities],
        "report": format_activity_history(activities, address),
    }


@app.post("/analyze", tags=["Wallet"])
async def analyze_wallet(
    req: AnalyzeRequest,
    format: Literal["markdown", "json", "csv", "excel"] = Query(
        default="markdown",
        description="Output format: markdown (default) | json | csv | excel",
    ),
):
    """
    Analyze a Solana wallet.

    Uses cached activity when available, otherwise fetches it first.
    DeFi position APYs are estimates sampled within protocol-specific ranges.
    """
    start = time.time()

    try:
        analysis = await tools.analyzer.analyze(req.address)
    except Exception as e:
        raise _http_error(e)

    short = analysis.address[:12]

    if format == "markdown":
        return PlainTextResponse(
            format_wallet_analysis(
                analysis.profile,
                analysis.patterns,
                analysis.positions,
                analysis.recommendations,
                analysis.recent_activities,
            ),
            media_type="text/markdown",
            headers={"X-Processing-Time-Ms": str(int((time.time() - start) * 1000))},
        )

    if format == "json":
        return StreamingResponse(
            content=io.BytesIO(to_json(analysis)),
            media_type="application/json",
        )

    if format == "csv":
        return StreamingResponse(
            content=io.BytesIO(to_csv(analysis)),
            media_type="text/csv",
            headers={
                "Content-Disposition": f'attachment; filename="wallet_{short}_analysis.csv"'
            },
        )

    return StreamingResponse(
        content=io.BytesIO(to_excel(analysis)),
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={
            "Content-Disposition": f'attachment; filename="wallet_{short}_analysis.xlsx"'
        },
    )


@app.get("/transactions/{signature}", tags=["Transaction"])
async def transaction_details(signature: str):
    try:
        details = await tools.analyzer.transaction_details(signature)
    except Exception as e:
        raise _http_error(e)

    return {
        "details": details.model_dump(),
        "report": format_transaction_details(details),
    }


# Mounted last so the routes above take precedence over the MCP app.
app.mount("/", mcp_app)


# ── Entry point ───────────────────────────────────────────────────────────────

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8000")),
        reload=os.getenv("APP_ENV", "development") == "development",
    )
