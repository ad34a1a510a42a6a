"""Application keys for type-safe app configuration access."""

import httpx
from aiohttp import web

from modview.core.enricher import PageEnricher
from modview.core.gateway import MetadataGateway
from modview.core.resolver import RedirectResolver
from modview.core.storage import RegistryStorage

http_client_key = web.AppKey("http_client", httpx.AsyncClient)
gateway_key = web.AppKey("gateway", MetadataGateway)
storage_key = web.AppKey("storage", RegistryStorage)
resolver_key = web.AppKey("resolver", RedirectResolver)
enricher_key = web.AppKey("enricher", PageEnricher)
