"""Content templates: the industry and business context a pipeline is built from.

Built-in templates ship with the package; custom templates are loaded from YAML
files with the same shape as `ContentTemplate`.
"""
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field

# Free-form questionnaire answers keyed by question id. Multi-select answers are lists.
TemplateAnswers = dict[str, str | list[str]]


class TemplateQuestion(BaseModel):
    id: str
    question: str
    type: Literal["text", "select", "textarea", "multiselect"] = "text"
    options: list[str] | None = None
    required: bool = False
    placeholder: str | None = None
    max_length: int | None = Field(default=None, ge=1)


class ContentTemplate(BaseModel):
    """Industry template with its questionnaire.

    `prompt_template` may reference answers as `{question_id}` placeholders.
    """

    id: str
    name: str
    type: Literal["built-in", "custom"] = "custom"
    industry: str
    description: str = ""
    questions: list[TemplateQuestion] = Field(default_factory=list)
    prompt_template: str = ""
    is_active: bool = True

    @classmethod
    def load(cls, path: Path) -> "ContentTemplate":
        """Load a template from a YAML file.

        Raises FileNotFoundError if path does not exist.
        """
        import yaml  # lazy, only needed at load time
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        return cls.model_validate(data)


def load_answers(path: Path) -> TemplateAnswers:
    """Read a YAML mapping of question id → answer.

    Blank answers (`key:` with no value) are left out, as are blank list items.
    """
    import yaml
    data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path} must contain a mapping of question ids to answers")
    answers: TemplateAnswers = {}
    for key, value in data.items():
        if value is None:
            continue
        if isinstance(value, list):
            answers[str(key)] = [str(item) for item in value if item is not None]
        else:
            answers[str(key)] = str(value)
    return answers


BUILT_IN_TEMPLATES: dict[str, ContentTemplate] = {
    "automotive": ContentTemplate(
        id="built-in-automotive",
        name="Automotive Dealership",
        type="built-in",
        industry="automotive",
        description="Perfect for car dealerships, auto services, and vehicle promotions",
        questions=[
            TemplateQuestion(id="business_name", question="What is your dealership or business name?",
                             required=True, placeholder="e.g., Smith Auto Group"),
            TemplateQuestion(id="vehicle_type", question="What type of vehicles do you specialize in?",
                             type="select", required=True,
                             options=["New Cars", "Used Cars", "Luxury Vehicles", "Trucks & SUVs",
                                      "Electric Vehicles", "All Types"]),
            TemplateQuestion(id="key_features", question="What are your key selling points?",
                             type="multiselect", required=True,
                             options=["Best Prices", "Quality Guarantee", "Financing Available",
                                      "Trade-ins Welcome", "Expert Service", "Wide Selection"]),
            TemplateQuestion(id="special_offer",
                             question="Do you have any current promotions or special offers?",
                             type="textarea"),
        ],
        prompt_template=(
            "{business_name}, specializing in {vehicle_type}. "
            "Key features: {key_features}. Special offers: {special_offer}"
        ),
    ),
    "retail": ContentTemplate(
        id="built-in-retail",
        name="Retail Store",
        type="built-in",
        industry="retail",
        description="Ideal for retail stores, boutiques, and e-commerce businesses",
        questions=[
            TemplateQuestion(id="store_name", question="What is your store name?",
                             required=True, placeholder="e.g., Fashion Forward Boutique"),
            TemplateQuestion(id="product_category", question="What type of products do you sell?",
                             type="select", required=True,
                             options=["Clothing & Fashion", "Electronics", "Home & Garden",
                                      "Beauty & Health", "Sports & Outdoors", "Books & Media", "Other"]),
            TemplateQuestion(id="unique_selling_points", question="What makes your store special?",
                             type="multiselect", required=True,
                             options=["Competitive Prices", "Unique Products", "Excellent Service",
                                      "Local Business", "Sustainable Products", "Expert Advice"]),
            TemplateQuestion(id="current_promotion", question="Any current sales or promotions?",
                             type="textarea"),
        ],
        prompt_template=(
            "{store_name}, a {product_category} store. "
            "Unique selling points: {unique_selling_points}. Current promotion: {current_promotion}"
        ),
    ),
    "restaurant": ContentTemplate(
        id="built-in-restaurant",
        name="Restaurant & Food Service",
        type="built-in",
        industry="restaurant",
        description="Great for restaurants, cafes, food trucks, and catering services",
        questions=[
            TemplateQuestion(id="restaurant_name", question="What is your restaurant name?",
                             required=True, placeholder="e.g., Bella Vista Italian Kitchen"),
            TemplateQuestion(id="cuisine_type", question="What type of cuisine do you serve?",
                             type="select", required=True,
                             options=["Italian", "Mexican", "Asian", "American", "Mediterranean",
                                      "Indian", "French", "Fusion", "Fast Food", "Other"]),
            TemplateQuestion(id="dining_style", question="What is your dining style?",
                             type="select", required=True,
                             options=["Fine Dining", "Casual Dining", "Fast Casual", "Food Truck",
                                      "Cafe/Bistro", "Takeout/Delivery", "Catering"]),
            TemplateQuestion(id="specialties", question="What are your signature dishes or specialties?",
                             type="textarea", required=True),
        ],
        prompt_template=(
            "{restaurant_name}, a {dining_style} {cuisine_type} restaurant. "
            "Specialties: {specialties}"
        ),
    ),
}


def built_in_template(industry: str) -> ContentTemplate:
    """Return the built-in template for `industry`.

    Raises ValueError for unknown industries.
    """
    try:
        return BUILT_IN_TEMPLATES[industry]
    except KeyError:
        known = ", ".join(sorted(BUILT_IN_TEMPLATES))
        raise ValueError(f"Unknown built-in template {industry!r} (known: {known})") from None
