from __future__ import annotations

from pydantic import BaseModel, Field

from resources.types import ResourceKind


class ProviderSettings(BaseModel):
    baseUrl: str = "http://localhost:8000"
    timeoutS: float = Field(default=10.0, gt=0.0)
    # The provider rejects limits outside 1..100.
    pageSize: int = Field(default=100, ge=1, le=100)
    token: str | None = None


class ClusteringSettings(BaseModel):
    distancePx: float = Field(default=50.0, gt=0.0)
    minDistancePx: float = Field(default=10.0, ge=0.0)
    hitRadiusPx: float = Field(default=20.0, gt=0.0)
    badgeRadiusPx: int = Field(default=20, ge=1)


class LayerSettings(BaseModel):
    """
    Per-resource-kind marker styling.

    `categoryIcons` maps a container category to its icon; kinds without categories
    fall back to `iconSrc`.
    """

    title: str
    iconSrc: str
    selectedIconSrc: str | None = None
    categoryIcons: dict[str, str] = Field(default_factory=dict)
    selectedCategoryIcons: dict[str, str] = Field(default_factory=dict)
    clusterBorderColor: str = "#2e7d32"


class TelemetrySettings(BaseModel):
    enabled: bool = True
    path: str | None = None


class Settings(BaseModel):
    provider: ProviderSettings = Field(default_factory=ProviderSettings)
    clustering: ClusteringSettings = Field(default_factory=ClusteringSettings)
    layers: dict[ResourceKind, LayerSettings] = Field(default_factory=dict)
    telemetry: TelemetrySettings = Field(default_factory=TelemetrySettings)
    seedPath: str | None = None
    logLevel: str = "INFO"

    def layer(self, kind: ResourceKind) -> LayerSettings:
        cfg = self.layers.get(kind)
        if cfg is None:
            return LayerSettings(title=kind.capitalize(), iconSrc=f"/icons/{kind}.svg")
        return cfg
