"""Prompt for identifying, categorising and pricing an item from its photo."""

import json

SYSTEM = "You are a helpful assistant"


def inventory_prompt(
    titles: list[str],
    categories: list[str],
    conditions: list[str],
    prices: list[str],
) -> str:
    """Build the extraction prompt from the visual-search matches and vocabularies."""
    input_block = f"""[INPUT]
image_description: <Describe the key features and details of the image>
web_content: <Summarize relevant information from the associated web pages>
titles: {json.dumps(titles)}
categories: {json.dumps(categories)}
conditions: {json.dumps(conditions)}
prices: {json.dumps(prices)}"""

    return f"""
[TASK]
Analyze the provided image and associated web page content to identify the item, determine its category, assess its condition, and estimate its resale price. Your goal is to extract a canonical product name, select the most appropriate category, determine the item's condition, and provide a reasoned price estimate based on the information available and the provided price range.

You can call the retrieve_item_information tool to look up details from the web pages of the matching listings.

[GUIDELINES]
1. Item Identification:
   - Prioritize the most complete and informative version of the name.
   - Include specific model numbers or versions when consistently present.
   - Retain brand names and product lines.
   - Exclude temporary promotional phrases or irrelevant details.
   - Maintain proper capitalization and spacing.
   - If dealing with a product series, use the most general form unless a specific model is predominant.

2. Category Selection:
   - Choose exactly one category from the provided categories list.
   - Prefer the most specific category that still fits the item.

3. Condition Assessment:
   - Choose exactly one condition from the provided conditions list.
   - Judge from visible wear, damage, and completeness in the image.

4. Price Estimation:
   - Consider the item's category and how it typically depreciates.
   - Factor in brand value and its impact on resale prices.
   - Assess how the condition affects the item's desirability and price.
   - Reflect on market demand and supply for similar items.
   - Use a consistent scale for condition assessment: Poor < Fair < Good < Very Good < Excellent < Like New.
   - Provide prices in whole dollar amounts, rounding to the nearest dollar.
   - Use the provided prices as a guideline, but don't feel constrained by them if your analysis suggests a price outside this range.

[FORMAT]
Use the following format for your response:

{input_block}

[ANALYSIS]
<Provide a step-by-step analysis of the image, web content, given titles, categories, conditions, and prices>

[REASONING]
<Explain your thought process for selecting the final product name, category, condition, and estimated price>

[MARKET CONSIDERATIONS]
<Discuss relevant market factors, trends, or comparable items that influence the price estimation>

[OUTPUT]
name: <The finalized product name in 10 words or less>
category: <The best fitting category for the item>
condition: <The best describing condition for the item's overall state>
price: <Your estimated resale price in USD>
description: <A brief description of the item in 10 words or less>

[EXAMPLES]

[Example 1]
[INPUT]
image_description: A mid-century walnut sideboard with three drawers and tapered legs, light surface scratches on top.
web_content: Listings describe the West Elm Mid-Century 60" Buffet in walnut veneer with soft-close drawers.
titles: ["West Elm Mid-Century Buffet 60\\"", "Mid Century Walnut Sideboard", "West Elm Mid-Century 3-Drawer Buffet"]
categories: ["Sofa", "Table", "Chair", "Storage", "Bed"]
conditions: ["New", "Like New", "Good", "Fair", "Poor"]
prices: ["$1,299", "$899", "$1,099"]

[ANALYSIS]
- The image and web content depict a West Elm Mid-Century buffet
- Titles agree on brand and product line; one omits the brand
- "Storage" is the only category that fits a sideboard
- Light scratches on the top suggest used but well kept

[REASONING]
"West Elm Mid-Century 3-Drawer Buffet" keeps brand, line and configuration. Category is Storage. Visible light wear places it at Good. New prices cluster around $1,100; a Good-condition resale typically lands near half of retail.

[MARKET CONSIDERATIONS]
- Mid-century styles resell well
- Veneer pieces lose more value than solid wood
- Large case goods have a smaller local buyer pool

[OUTPUT]
name: West Elm Mid-Century 3-Drawer Buffet
category: Storage
condition: Good
price: 550
description: Walnut veneer mid-century buffet with three soft-close drawers

Now, analyze the given input and provide your response:

{input_block}
"""
