from typing import Any, Dict

from pydantic import BaseModel, Field


class ModelBackend(BaseModel):
    """Fixed configuration of one external image model.

    Backends differ only in the parameters sent with a prediction, so the
    request handler takes one of these instead of growing a code path per model.
    """

    name: str
    version: str = Field(description="Replicate model version id")
    prompt: str
    parameters: Dict[str, Any] = Field(default_factory=dict)

    model_config = {"frozen": True}

    def build_input(self, image_ref: str) -> Dict[str, Any]:
        return {"image": image_ref, "prompt": self.prompt, **self.parameters}


# Flux QFACES, trained on high quality facial photos
FLUX_QFACES = ModelBackend(
    name="flux-qfaces",
    version="4d1d2ea165dffc2d84792d350e9819e3eeb03dc6ceaffcd9c859bbc2d7301f7e",
    prompt=(
        "photo, high resolution, natural skin texture, visible pores, realistic, "
        "QFACES, photograph, detailed facial features, authentic"
    ),
    parameters={
        "model": "dev",
        "go_fast": False,
        "lora_scale": 0.5,
        # 0 keeps the subject's identity as close as possible
        "guidance_scale": 0,
        # low strength means a subtle enhancement
        "prompt_strength": 0.25,
        "num_inference_steps": 50,
        "output_format": "png",
        "output_quality": 90,
    },
)

BACKENDS: Dict[str, ModelBackend] = {FLUX_QFACES.name: FLUX_QFACES}


def get_backend(name: str) -> ModelBackend:
    try:
        return BACKENDS[name]
    except KeyError:
        raise KeyError(
            f"Unknown model backend '{name}', available: {', '.join(sorted(BACKENDS))}"
        ) from None
