"""
HTTP client for the nullpact API server
"""
from typing import Any, Dict, List, Optional

import requests


class NullpactClient:
    """
    Talks to a running nullpact server.

    Example usage:
        client = NullpactClient("http://localhost:8000")

        result = client.check_source(source, check_contracts=True)
        for function in result["results"]:
            print(function["name"], function["clean"])
    """

    def __init__(self, base_url: str = "http://localhost:8000", timeout: float = 30.0):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def health(self) -> Dict[str, Any]:
        response = requests.get(f"{self.base_url}/", timeout=self.timeout)
        response.raise_for_status()
        return response.json()

    def check_source(self, source: str,
                     filename: str = "<string>",
                     check_contracts: Optional[bool] = None,
                     contract_annotations: Optional[List[str]] = None) -> Dict[str, Any]:
        """
        Check a source string on the server.

        Returns:
            The check summary dict

        Raises:
            requests.HTTPError: On a non-2xx response
            ValueError: If the server could not check the source
        """
        return self._post_check("/api/check-source", {
            "source": source,
            "filename": filename,
            "check_contracts": check_contracts,
            "contract_annotations": contract_annotations
        })

    def check_file(self, file_path: str,
                   check_contracts: Optional[bool] = None,
                   contract_annotations: Optional[List[str]] = None) -> Dict[str, Any]:
        """Check a file that is readable by the server"""
        return self._post_check("/api/check-file", {
            "file_path": file_path,
            "check_contracts": check_contracts,
            "contract_annotations": contract_annotations
        })

    def validate_contract(self, contract: str, parameters: Optional[List[str]] = None) -> Dict[str, Any]:
        response = requests.post(
            f"{self.base_url}/api/validate-contract",
            json={"contract": contract, "parameters": parameters or []},
            timeout=self.timeout
        )
        response.raise_for_status()
        return response.json()

    def _post_check(self, path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        response = requests.post(f"{self.base_url}{path}", json=payload, timeout=self.timeout)
        response.raise_for_status()
        data = response.json()
        if not data.get("success"):
            raise ValueError(data.get("error") or "check failed")
        return data["result"]
