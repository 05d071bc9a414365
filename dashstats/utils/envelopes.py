from typing import Any, Dict


def api_error(message: str) -> Dict[str, Any]:
	return {"error": message}
