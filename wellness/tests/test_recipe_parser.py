from wellness.app.services.recipe_parser import RecipeParser


FULL_RECIPE = """# Lemon Herb Chicken
A bright, weeknight-friendly dinner.

Ready in half an hour.

## What You'll Need
- 4 chicken thighs
- 2 lemons
* 1 tbsp olive oil

## What To Do
1. Pat the chicken dry.
2. Season with lemon and herbs.
3) Roast for 25 minutes.

## Play With Your Food
Swap the lemons for oranges.

Add a pinch of chili for heat.

## Summary
A simple roast that tastes like summer.

**Tags:**
- chicken
- weeknight

---

## Recipe Info
**Servings:** 4
**Prep Time:** 10 minutes
**Cook Time:** 25 minutes
**Total Time:** 35 minutes
**Calories:** 420 per serving
**Dietary Tags:** gluten-free, dairy-free
"""


def test_full_recipe_populates_every_field():
    recipe = RecipeParser.parse(FULL_RECIPE)

    assert recipe.title == "Lemon Herb Chicken"
    assert recipe.summary == "A bright, weeknight-friendly dinner.\n\nReady in half an hour."
    assert recipe.ingredients == ["4 chicken thighs", "2 lemons", "1 tbsp olive oil"]
    assert recipe.instructions == [
        "Pat the chicken dry.",
        "Season with lemon and herbs.",
        "Roast for 25 minutes.",
    ]
    assert recipe.notes == "Swap the lemons for oranges.\n\nAdd a pinch of chili for heat."
    assert recipe.closing_summary == "A simple roast that tastes like summer."
    assert recipe.tags == ["chicken", "weeknight"]

    info = recipe.info
    assert info is not None
    assert info.servings == 4
    assert info.prep_minutes == 10
    assert info.cook_minutes == 25
    assert info.total_minutes == 35
    assert info.calories_per_serving == 420
    assert info.dietary_tags == ["gluten-free", "dairy-free"]


def test_title_only_leaves_defaults():
    recipe = RecipeParser.parse("# Just a Title")

    assert recipe.title == "Just a Title"
    assert recipe.summary == ""
    assert recipe.ingredients == []
    assert recipe.instructions == []
    assert recipe.notes == ""
    assert recipe.closing_summary == ""
    assert recipe.tags == []
    assert recipe.info is None


def test_empty_text_does_not_raise():
    recipe = RecipeParser.parse("")
    assert recipe.title == ""
    assert recipe.ingredients == []


def test_bullets_stripped_in_order():
    recipe = RecipeParser.parse("## What You'll Need\n- a\n- b\n- c")
    assert recipe.ingredients == ["a", "b", "c"]


def test_numbered_steps_stripped_in_order():
    recipe = RecipeParser.parse("## What To Do\n1. Chop\n2. Mix")
    assert recipe.instructions == ["Chop", "Mix"]


def test_non_numbered_lines_skipped_in_instructions():
    text = "## What To Do\nBefore you start, preheat.\n1. Chop\n\n2. Mix\n### Tip\nUse a sharp knife."
    assert RecipeParser.parse(text).instructions == ["Chop", "Mix"]


def test_section_ends_at_horizontal_rule():
    text = "## What You'll Need\n- flour\n---\n- not an ingredient"
    assert RecipeParser.parse(text).ingredients == ["flour"]


def test_servings_with_and_without_bold():
    bold = RecipeParser.parse("## Recipe Info\n**Servings:** 4")
    plain = RecipeParser.parse("## Recipe Info\nServings: 4")
    assert bold.info.servings == 4
    assert plain.info.servings == 4


def test_info_takes_first_integer():
    text = "## Recipe Info\n- **Prep Time**: about 1 hour 15 minutes\n- Calories per serving: ~350 kcal"
    info = RecipeParser.parse(text).info
    assert info.prep_minutes == 1
    assert info.calories_per_serving == 350
    assert info.servings is None
    assert info.dietary_tags == []


def test_inline_tags_on_marker_line():
    recipe = RecipeParser.parse("# Soup\n\n**Tags:** cozy, vegetarian\n- quick")
    assert recipe.tags == ["cozy", "vegetarian", "quick"]
    assert recipe.summary == ""


def test_notes_kept_as_block():
    text = "## Play With Your Food\n- Try basil\n- Try mint\n\n## Summary\nDone."
    recipe = RecipeParser.parse(text)
    assert recipe.notes == "- Try basil\n- Try mint"
    assert recipe.closing_summary == "Done."


def test_is_recipe_response_headings():
    assert RecipeParser.is_recipe_response("# What To Do\n1. Stir")
    assert RecipeParser.is_recipe_response("Intro\n\n## What You'll Need\n- eggs")
    assert RecipeParser.is_recipe_response("## What You’ll Need 🛒\n- eggs")


def test_is_recipe_response_rejects_other_text():
    assert not RecipeParser.is_recipe_response("Ciao bella! What would you like to cook?")
    assert not RecipeParser.is_recipe_response("### What You'll Need\n- eggs")
    assert not RecipeParser.is_recipe_response("Here is what you'll need: eggs")
    assert not RecipeParser.is_recipe_response("")
    assert not RecipeParser.is_recipe_response(None)


def test_serializes_with_camel_case_aliases():
    data = RecipeParser.parse(FULL_RECIPE).model_dump(by_alias=True)
    assert data["closingSummary"] == "A simple roast that tastes like summer."
    assert data["info"]["caloriesPerServing"] == 420
    assert data["info"]["dietaryTags"] == ["gluten-free", "dairy-free"]


def test_closing_hashes_need_a_space():
    assert RecipeParser.parse("# Learn C#").title == "Learn C#"
    assert RecipeParser.parse("# Pesto ##").title == "Pesto"


def test_headings_without_space_after_hashes():
    text = "#Caprese\n##What You'll Need\n- tomatoes\n##What To Do\n1. Slice"
    assert RecipeParser.is_recipe_response(text)
    recipe = RecipeParser.parse(text)
    assert recipe.title == "Caprese"
    assert recipe.ingredients == ["tomatoes"]
    assert recipe.instructions == ["Slice"]
