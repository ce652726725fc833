"""Analysis dispatcher: local statistics or remote generative reports."""

import logging
from dataclasses import dataclass
from typing import Any, Optional

from price_analyzer.ai.prompts.market_analysis import MarketAnalysisPrompt, MarketPredictionPrompt
from price_analyzer.ai.providers.base import BaseProvider
from price_analyzer.schemas.analysis import AnalysisContext, AnalysisMode, AnalysisReport, StepStatus
from price_analyzer.services.local_analysis import analyze_locally, compute_metrics
from price_analyzer.utils.errors import AnalysisServiceError, PredictionUnavailable, PriceAnalyzerError

logger = logging.getLogger(__name__)

PREDICTION_UNAVAILABLE_MESSAGE = "Market prediction temporarily unavailable"


@dataclass
class StepResult:
    """Result of one pipeline step."""

    status: StepStatus
    value: Any = None
    error: Optional[PriceAnalyzerError] = None

    @classmethod
    def ok(cls, value: Any) -> "StepResult":
        return cls(StepStatus.OK, value)

    @classmethod
    def empty(cls, error: Optional[PriceAnalyzerError] = None, value: Any = None) -> "StepResult":
        return cls(StepStatus.RECOVERABLE_EMPTY, value, error)

    @classmethod
    def fatal(cls, error: PriceAnalyzerError) -> "StepResult":
        return cls(StepStatus.FATAL, None, error)

    def unwrap(self) -> Any:
        if self.status == StepStatus.FATAL and self.error is not None:
            raise self.error
        return self.value


class AnalysisDispatcher:
    """Routes an analysis context to the local analyzer or the generative service."""

    def __init__(
        self,
        provider: BaseProvider,
        analysis_prompt: Optional[MarketAnalysisPrompt] = None,
        prediction_prompt: Optional[MarketPredictionPrompt] = None,
    ):
        self.provider = provider
        self.analysis_prompt = analysis_prompt or MarketAnalysisPrompt()
        self.prediction_prompt = prediction_prompt or MarketPredictionPrompt()
        self.logger = logging.getLogger(__name__)

    async def analyze(self, context: AnalysisContext, mode: AnalysisMode) -> AnalysisReport:
        """Run the analysis in the requested mode.

        Raises:
            AnalysisServiceError: If the remote analysis call fails
        """
        if mode == AnalysisMode.LOCAL:
            return self.run_local(context)

        analysis = (await self.run_remote_analysis(context)).unwrap()

        prediction_step = await self.run_prediction(context)
        prediction = prediction_step.value if prediction_step.status == StepStatus.OK else None

        return AnalysisReport(
            mode=AnalysisMode.REMOTE,
            analysis=analysis,
            prediction=prediction if prediction is not None else PREDICTION_UNAVAILABLE_MESSAGE,
            prediction_status=prediction_step.status,
        )

    def run_local(self, context: AnalysisContext) -> AnalysisReport:
        text = analyze_locally(context.product, context.historical_data, context.similar_products)
        return AnalysisReport(
            mode=AnalysisMode.LOCAL,
            analysis=text,
            metrics=compute_metrics(context.historical_data),
        )

    async def run_remote_analysis(self, context: AnalysisContext) -> StepResult:
        prompt = self.analysis_prompt
        try:
            text = await self.provider.generate_text(
                prompt.to_messages(**prompt.variables(context)),
                model=prompt.config.model,
                temperature=prompt.config.temperature,
                max_tokens=prompt.config.max_tokens,
            )
        except Exception as e:
            self.logger.error(f"Remote analysis failed for {context.product.hsn_code}: {e}")
            error = AnalysisServiceError(f"Failed to analyze with {self.provider.provider}: {e}")
            error.__cause__ = e
            return StepResult.fatal(error)

        return StepResult.ok(text or "No response")

    async def run_prediction(self, context: AnalysisContext) -> StepResult:
        prompt = self.prediction_prompt
        try:
            text = await self.provider.generate_text(
                prompt.to_messages(**prompt.variables(context)),
                model=prompt.config.model,
                temperature=prompt.config.temperature,
                max_tokens=prompt.config.max_tokens,
            )
        except Exception as e:
            self.logger.warning(f"Prediction unavailable for {context.product.hsn_code}: {e}")
            error = PredictionUnavailable(f"Failed to generate prediction: {e}")
            error.__cause__ = e
            return StepResult.empty(error)

        return StepResult.ok(text or "No prediction available")
