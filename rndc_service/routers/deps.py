"""Shared route dependencies: active credentials and the RNDC transport."""

from __future__ import annotations

import httpx
from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from rndc_service.core.database import get_session
from rndc_service.services.credentials import RndcCredentials, load_active_credentials
from rndc_service.services.errors import ConfigurationError
from rndc_service.services.soap_client import RndcSoapClient


async def get_credentials(session: AsyncSession = Depends(get_session)) -> RndcCredentials:
    try:
        return await load_active_credentials(session)
    except ConfigurationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc


def get_http_client(request: Request) -> httpx.AsyncClient:
    return request.app.state.http_client


def get_transport(
    credentials: RndcCredentials = Depends(get_credentials),
    http_client: httpx.AsyncClient = Depends(get_http_client),
) -> RndcSoapClient:
    return RndcSoapClient.from_credentials(http_client, credentials)


def not_found(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=detail)
