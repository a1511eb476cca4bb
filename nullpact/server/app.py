#!/usr/bin/env python3
"""
nullpact FastAPI Server
Provides a REST API for contract validation and checking
"""
import logging
from pathlib import Path
from typing import List, Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from nullpact import __version__
from nullpact.contracts import ContractSyntaxError, parse_clause, split_clauses
from nullpact.core.config import CheckerConfig
from nullpact.verify import check_file, check_source

logger = logging.getLogger(__name__)


# ============================================================================
# Request/Response Models
# ============================================================================

class CheckSourceRequest(BaseModel):
    source: str
    filename: Optional[str] = "<string>"
    check_contracts: Optional[bool] = None
    contract_annotations: Optional[List[str]] = None


class CheckFileRequest(BaseModel):
    file_path: str
    check_contracts: Optional[bool] = None
    contract_annotations: Optional[List[str]] = None


class CheckResponse(BaseModel):
    success: bool
    result: Optional[dict] = None
    error: Optional[str] = None


class ValidateContractRequest(BaseModel):
    contract: str
    parameters: List[str] = []


class ValidateContractResponse(BaseModel):
    valid: bool
    deep_checkable: bool = False
    errors: List[str] = []
    warnings: List[str] = []


class HealthResponse(BaseModel):
    status: str
    version: str
    check_contracts: bool


# ============================================================================
# FastAPI App
# ============================================================================

app = FastAPI(
    title="nullpact API",
    description="Nullness contract checking for Python functions",
    version=__version__
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_config(check_contracts: Optional[bool] = None,
               contract_annotations: Optional[List[str]] = None) -> CheckerConfig:
    """Environment settings with per-request overrides"""
    return CheckerConfig.from_env().with_overrides(
        check_contracts=check_contracts,
        contract_annotations=contract_annotations
    )


# ============================================================================
# Endpoints
# ============================================================================

@app.get("/", response_model=HealthResponse)
async def health():
    """Health check endpoint"""
    return {
        "status": "ok",
        "version": __version__,
        "check_contracts": get_config().check_contracts
    }


@app.post("/api/check-source", response_model=CheckResponse)
async def check_source_endpoint(request: CheckSourceRequest):
    """
    Check every @contract function in a source string.

    Example:
        POST /api/check-source
        {
            "source": "@contract(\\"!null -> !null\\")\\ndef f(s):\\n    return None\\n",
            "check_contracts": true
        }
    """
    config = get_config(request.check_contracts, request.contract_annotations)
    try:
        summary = check_source(request.source, filename=request.filename or "<string>", config=config)
    except SyntaxError as e:
        logger.info("check-source: unparseable input: %s", e)
        return {"success": False, "error": f"Syntax error: {e}"}

    return {"success": True, "result": summary.to_dict()}


@app.post("/api/check-file", response_model=CheckResponse)
async def check_file_endpoint(request: CheckFileRequest):
    """
    Check every @contract function in a file on the server.

    Example:
        POST /api/check-file
        {"file_path": "/path/to/file.py", "check_contracts": true}
    """
    if not Path(request.file_path).exists():
        raise HTTPException(status_code=404, detail="File not found")

    config = get_config(request.check_contracts, request.contract_annotations)
    try:
        summary = check_file(request.file_path, config=config)
    except SyntaxError as e:
        logger.info("check-file: unparseable %s: %s", request.file_path, e)
        return {"success": False, "error": f"Syntax error: {e}"}

    return {"success": True, "result": summary.to_dict()}


@app.post("/api/validate-contract", response_model=ValidateContractResponse)
async def validate_contract(request: ValidateContractRequest):
    """
    Validate contract text without any function body.

    Example:
        POST /api/validate-contract
        {"contract": "!null -> !null", "parameters": ["text"]}
    """
    errors = []
    warnings = []

    clauses = split_clauses(request.contract)
    if len(clauses) != 1:
        warnings.append(f"Contract has {len(clauses)} clauses; only single-clause contracts are checked")
        return {"valid": True, "deep_checkable": False, "errors": errors, "warnings": warnings}

    try:
        parsed = parse_clause(clauses[0], len(request.parameters))
    except ContractSyntaxError as e:
        return {"valid": False, "errors": [str(e)], "warnings": warnings}

    if len(parsed.raw_antecedent) != len(request.parameters):
        errors.append(
            f"Antecedent has {len(parsed.raw_antecedent)} value constraint(s) "
            f"but {len(request.parameters)} parameter(s) were given"
        )
    for token in parsed.invalid_tokens:
        errors.append(f"Unknown value constraint: {token}")

    if parsed.valid and not parsed.checkable:
        warnings.append("Contract is valid but its body cannot be checked "
                        "(antecedent must use _, null, !null and the consequent must be !null)")

    return {
        "valid": not errors,
        "deep_checkable": not errors and parsed.checkable,
        "errors": errors,
        "warnings": warnings
    }


if __name__ == "__main__":
    import uvicorn

    print("=" * 60)
    print("nullpact API Server")
    print("=" * 60)
    print(f"Deep checking: {'enabled' if get_config().check_contracts else 'disabled'} "
          f"(NULLPACT_CHECK_CONTRACTS)")
    print("Starting server on http://localhost:8000")
    print("=" * 60)

    uvicorn.run(app, host="0.0.0.0", port=8000)
