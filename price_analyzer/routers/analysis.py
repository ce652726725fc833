"""Price analysis endpoints."""

from typing import List

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from price_analyzer.logic import price_analysis
from price_analyzer.routers.dependencies import get_services
from price_analyzer.schemas.analysis import AnalysisRequest, PriceAnalysisResult
from price_analyzer.security import verify_api_key
from price_analyzer.services.container import ServiceContainer

router = APIRouter(prefix="/analysis", tags=["Analysis"], dependencies=[Depends(verify_api_key)])


class MarketsResponse(BaseModel):
    hsn_code: str
    markets: List[str]


@router.post("", response_model=PriceAnalysisResult)
async def analyze(request: AnalysisRequest, services: ServiceContainer = Depends(get_services)):
    """Analyze historical prices for a product in a market."""
    return await price_analysis.analyze_product(services, request)


@router.get("/markets/{hsn_code}", response_model=MarketsResponse)
async def get_available_markets(hsn_code: str, services: ServiceContainer = Depends(get_services)):
    """Markets that have price data for an HSN code."""
    markets = await price_analysis.list_markets(services, hsn_code)
    return MarketsResponse(hsn_code=hsn_code, markets=markets)
