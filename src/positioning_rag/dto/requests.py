"""Request DTOs for API endpoints."""

from pydantic import BaseModel, Field

from positioning_rag.entities import Anchor, CoreMessaging, GenerationSettings


class AnchorModel(BaseModel):
    """A positioning anchor as submitted by the client."""

    content: str = Field(..., description="Anchor text, e.g. 'project management software'")
    type: str = Field("", description="Anchor type, e.g. 'product_category' or 'company_type'")


class GenerationSettingsModel(BaseModel):
    """Sampling parameters for the generation service."""

    temperature: float = Field(0.3, description="Sampling temperature", ge=0.0, le=1.0)
    top_p: float = Field(0.8, description="Nucleus sampling cutoff", ge=0.0, le=1.0)


class PositioningRequest(BaseModel):
    """Request DTO for positioning generation.

    The handler converts this to a ``CoreMessaging`` entity before calling
    the pipeline.
    """

    primary_anchor: AnchorModel
    secondary_anchor: AnchorModel = Field(default_factory=lambda: AnchorModel(content=""))
    problem: str = Field("", description="The customer problem being solved")
    differentiator: str = Field("", description="What sets the product apart")
    icp: list[str] = Field(default_factory=list, description="Ideal customer profile segments")
    generation_settings: GenerationSettingsModel = Field(default_factory=GenerationSettingsModel)
    thesis: list[str] = Field(default_factory=list, description="Passed through to the response unchanged")
    risks: list[str] = Field(default_factory=list, description="Passed through to the response unchanged")

    def to_entity(self) -> CoreMessaging:
        return CoreMessaging(
            primary_anchor=Anchor(content=self.primary_anchor.content, anchor_type=self.primary_anchor.type),
            secondary_anchor=Anchor(content=self.secondary_anchor.content, anchor_type=self.secondary_anchor.type),
            problem=self.problem,
            differentiator=self.differentiator,
            icp=tuple(self.icp),
            generation_settings=GenerationSettings(
                temperature=self.generation_settings.temperature,
                top_p=self.generation_settings.top_p,
            ),
            thesis=tuple(self.thesis),
            risks=tuple(self.risks),
        )


class HighlightRequest(BaseModel):
    """Request DTO for attributing arbitrary copy (e.g. after user edits)."""

    text: str = Field(..., description="The copy to highlight")
    messaging: PositioningRequest
