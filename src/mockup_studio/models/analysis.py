from pydantic import BaseModel, ConfigDict, Field, field_validator

NOT_APPLICABLE = "N/A"


class StyleReferenceAnalysis(BaseModel):
    """스타일 레퍼런스 이미지의 미학적 특성 (제품·텍스트 내용 제외)."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    environment: str = Field(
        default=NOT_APPLICABLE,
        alias="Environment",
        description="Description of the background and overall setting",
    )
    lighting: str = Field(
        default=NOT_APPLICABLE,
        alias="Lighting",
        description="Description of the lighting style and direction",
    )
    colors: str = Field(
        default=NOT_APPLICABLE,
        alias="Colors",
        description="Description of the main color palette and mood",
    )
    camera_framing: str = Field(
        default=NOT_APPLICABLE,
        alias="Camera framing",
        description="Description of camera angle, depth of field, and composition",
    )
    texture_and_materials: str = Field(
        default=NOT_APPLICABLE,
        alias="Texture & materials",
        description="Description of prominent textures and materials in the scene",
    )
    atmosphere: str = Field(
        default=NOT_APPLICABLE,
        alias="Atmosphere",
        description="Description of the overall mood or feeling",
    )

    @field_validator("*", mode="before")
    @classmethod
    def _blank_to_not_applicable(cls, value):
        if value is None or (isinstance(value, str) and not value.strip()):
            return NOT_APPLICABLE
        return value

    def to_prompt(self) -> str:
        """컴포저에 주입할 6줄 스타일 설명 블록."""
        return "\n".join(
            [
                f"- Environment: {self.environment}",
                f"- Lighting: {self.lighting}",
                f"- Colors: {self.colors}",
                f"- Camera framing: {self.camera_framing}",
                f"- Texture & materials: {self.texture_and_materials}",
                f"- Atmosphere: {self.atmosphere}",
            ]
        )


class ProductVibeAnalysis(BaseModel):
    model_config = ConfigDict(frozen=True)

    keywords: str = Field(
        min_length=1,
        description="3-5 mood/theme keywords or a very short phrase, e.g. 'fresh, nature, green'",
    )


class LabelText(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    extracted_text: str = Field(
        alias="extractedText",
        description="The verbatim text extracted from the product label.",
    )
