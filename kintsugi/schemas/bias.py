from typing import List, Literal, Optional

from kintsugi.schemas.sentiment import CamelModel, CulturalContext


class BiasDetectionRequest(CamelModel):
    text: Optional[str] = None
    cultural_context: Optional[CulturalContext] = None


class DetectedBias(CamelModel):
    bias_type: str
    original_thought: str
    reframe: str
    kintsugi_connection: str
    confidence: float


class BiasDetectionResponse(CamelModel):
    success: bool
    bias_detected: bool
    biases: Optional[List[DetectedBias]] = None
    error: Optional[str] = None
    source: Literal["local", "smart"] = "local"
