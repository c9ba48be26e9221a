from typing import Optional

from fastapi import FastAPI, Query, Request
from fastapi.responses import JSONResponse

from mock_data import MOCK_USAGE

app = FastAPI(
    title="Copilot Usage Mock API",
    description="Serves generated Copilot usage metrics on the GitHub REST API paths",
    version="1.0.0"
)


def _paginated_usage(
    request: Request,
    since: Optional[str],
    until: Optional[str],
    page: int,
    per_page: int,
) -> JSONResponse:
    days = [
        record for record in MOCK_USAGE
        if (not since or record["day"] >= since[:10])
        and (not until or record["day"] <= until[:10])
    ]

    start_idx = (page - 1) * per_page
    end_idx = start_idx + per_page
    headers = {}
    if end_idx < len(days):
        next_url = request.url.include_query_params(page=page + 1, per_page=per_page)
        headers["Link"] = f'<{next_url}>; rel="next"'

    return JSONResponse(content=days[start_idx:end_idx], headers=headers)


@app.get("/")
def root():
    return {
        "message": "Copilot Usage Mock API",
        "version": "1.0.0",
        "endpoints": {
            "enterprise_usage": "/enterprises/{enterprise}/copilot/usage",
            "organization_usage": "/orgs/{org}/copilot/usage",
            "team_usage": "/orgs/{org}/team/{team}/copilot/usage"
        }
    }


@app.get("/enterprises/{enterprise}/copilot/usage")
def get_enterprise_usage(
    request: Request,
    enterprise: str,
    since: Optional[str] = Query(None, description="Start date, ISO 8601"),
    until: Optional[str] = Query(None, description="End date, ISO 8601"),
    page: int = Query(1, ge=1, description="Page number"),
    per_page: int = Query(28, ge=1, le=100, description="Days per page")
):
    return _paginated_usage(request, since, until, page, per_page)


@app.get("/orgs/{org}/copilot/usage")
def get_org_usage(
    request: Request,
    org: str,
    since: Optional[str] = Query(None, description="Start date, ISO 8601"),
    until: Optional[str] = Query(None, description="End date, ISO 8601"),
    page: int = Query(1, ge=1, description="Page number"),
    per_page: int = Query(28, ge=1, le=100, description="Days per page")
):
    return _paginated_usage(request, since, until, page, per_page)


@app.get("/orgs/{org}/team/{team}/copilot/usage")
def get_team_usage(
    request: Request,
    org: str,
    team: str,
    since: Optional[str] = Query(None, description="Start date, ISO 8601"),
    until: Optional[str] = Query(None, description="End date, ISO 8601"),
    page: int = Query(1, ge=1, description="Page number"),
    per_page: int = Query(28, ge=1, le=100, description="Days per page")
):
    return _paginated_usage(request, since, until, page, per_page)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="127.0.0.1", port=8000)
