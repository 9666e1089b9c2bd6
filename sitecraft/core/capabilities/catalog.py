"""The capability catalog: every action the AI webmaster can offer.

This is the single source of truth the prompt builder, the matcher and the
``/ai/command`` route read from.  Add new capabilities here; never construct
``Capability`` records elsewhere.
"""
from __future__ import annotations

from sitecraft.core.capabilities.models import (
    Capability,
    CapabilityCategory as Cat,
    CapabilityGroup,
    CapabilityRequirements,
    CapabilityStatus as Status,
    PlanTier,
)

CAPABILITIES: tuple[Capability, ...] = (
    # ── Content ──────────────────────────────────────────────────────────────
    Capability(
        id="add_section",
        name="Add Section",
        description=(
            "Add a new section to the website (hero, features, testimonials, about, "
            "services, pricing, contact, FAQ, gallery, team, blog, newsletter, CTA)"
        ),
        category=Cat.CONTENT,
        status=Status.ACTIVE,
        triggers=(
            "add", "new section", "insert", "create section", "testimonials",
            "features", "about", "services", "pricing", "contact", "faq",
            "gallery", "team", "blog",
        ),
        tool_name="add_section",
        examples=(
            "Add a testimonials section",
            "I need a pricing table",
            "Create an about us section",
            "Add a contact form",
        ),
        priority=10,
    ),
    Capability(
        id="edit_section",
        name="Edit Section",
        description="Modify existing section content including title, subtitle, text, and items",
        category=Cat.CONTENT,
        status=Status.ACTIVE,
        triggers=(
            "edit", "change", "update", "modify", "fix", "rewrite",
            "change title", "update text",
        ),
        tool_name="edit_section",
        examples=(
            "Change the hero title",
            "Update the about section text",
            "Edit the testimonial quotes",
            "Fix the pricing description",
        ),
        priority=10,
    ),
    Capability(
        id="remove_section",
        name="Remove Section",
        description="Delete a section from the website",
        category=Cat.CONTENT,
        status=Status.ACTIVE,
        triggers=("remove", "delete", "hide", "get rid of", "take out"),
        tool_name="remove_section",
        examples=(
            "Remove the testimonials section",
            "Delete the pricing table",
            "Hide the blog section",
        ),
        priority=10,
    ),
    Capability(
        id="reorder_sections",
        name="Reorder Sections",
        description="Change the order of sections on the page",
        category=Cat.CONTENT,
        status=Status.ACTIVE,
        triggers=("move", "reorder", "rearrange", "swap", "order", "put before", "put after"),
        tool_name="reorder_sections",
        examples=(
            "Move testimonials above pricing",
            "Put the contact section at the end",
            "Swap features and services",
        ),
        priority=8,
    ),
    # ── Design ───────────────────────────────────────────────────────────────
    Capability(
        id="update_colors",
        name="Change Colors",
        description="Update brand colors including primary, secondary, and accent colors",
        category=Cat.DESIGN,
        status=Status.ACTIVE,
        triggers=(
            "color", "colors", "palette", "brand color", "make it blue",
            "make it red", "change color", "theme",
        ),
        tool_name="update_colors",
        examples=(
            "Make the primary color blue",
            "Change the color scheme to green",
            "I want a warmer color palette",
            "Use #3b82f6 as the primary color",
        ),
        priority=10,
    ),
    Capability(
        id="update_fonts",
        name="Change Typography",
        description="Update heading and body font families",
        category=Cat.DESIGN,
        status=Status.ACTIVE,
        triggers=("font", "fonts", "typography", "text style", "heading font", "body font"),
        tool_name="update_fonts",
        examples=(
            "Use Playfair Display for headings",
            "Change to a more modern font",
            "Make the fonts more elegant",
        ),
        priority=10,
    ),
    Capability(
        id="change_layout",
        name="Change Section Layout",
        description="Switch between different layout variants for a section",
        category=Cat.DESIGN,
        status=Status.ACTIVE,
        triggers=("layout", "style", "variant", "look different", "different design", "format"),
        tool_name="change_layout",
        examples=(
            "Change the hero to a split layout",
            "Use a grid layout for features",
            "Make the testimonials a carousel",
        ),
        priority=8,
    ),
    # ── Media ────────────────────────────────────────────────────────────────
    Capability(
        id="generate_image",
        name="Generate Image with AI",
        description="Create custom images using DALL-E 3 AI image generation",
        category=Cat.MEDIA,
        status=Status.ACTIVE,
        triggers=(
            "generate image", "create image", "ai image", "picture of",
            "make an image", "illustration",
        ),
        tool_name="generate_image",
        requirements=CapabilityRequirements(plan=PlanTier.PRO),
        examples=(
            "Generate a hero image of a modern office",
            "Create an illustration for the about section",
            "Make an image showing our services",
        ),
        priority=10,
    ),
    Capability(
        id="generate_logo",
        name="Generate Logo with AI",
        description="Create logo variations using AI",
        category=Cat.MEDIA,
        status=Status.ACTIVE,
        triggers=("logo", "brand mark", "create logo", "generate logo", "company logo"),
        tool_name="generate_logo",
        examples=(
            "Generate a minimalist logo",
            "Create a logo for my bakery",
            "Design a modern tech logo",
        ),
        priority=10,
    ),
    Capability(
        id="generate_video",
        name="Generate Video with AI",
        description="Create short videos using Runway ML for backgrounds and content",
        category=Cat.MEDIA,
        status=Status.BETA,
        triggers=("video", "animation", "motion", "moving background", "generate video"),
        tool_name="generate_video",
        requirements=CapabilityRequirements(plan=PlanTier.ENTERPRISE),
        examples=(
            "Create a video background for the hero",
            "Generate an animated intro",
            "Make a motion graphic",
        ),
        priority=10,
    ),
    Capability(
        id="upload_asset",
        name="Upload Image/Asset",
        description="Upload your own images, logos, or files to use on the website",
        category=Cat.MEDIA,
        status=Status.ACTIVE,
        triggers=("upload", "my image", "add image", "my photo", "import"),
        ui_component="AssetUploader",
        examples=(
            "Upload my company logo",
            "Add my product photos",
            "Import images from my computer",
        ),
        priority=8,
    ),
    Capability(
        id="suggest_images",
        name="Suggest Images",
        description="Get AI suggestions for images that would work well in a section",
        category=Cat.MEDIA,
        status=Status.ACTIVE,
        triggers=("suggest images", "image ideas", "what images", "recommend photos"),
        tool_name="suggest_images",
        examples=(
            "Suggest images for the hero section",
            "What images would work for testimonials?",
        ),
        priority=6,
    ),
    # ── Structure ────────────────────────────────────────────────────────────
    Capability(
        id="update_navigation",
        name="Update Navigation",
        description="Modify the website navigation menu items and style",
        category=Cat.STRUCTURE,
        status=Status.ACTIVE,
        triggers=("navigation", "menu", "nav", "links", "menu items"),
        tool_name="update_navigation",
        examples=(
            "Add a link to the menu",
            "Remove the blog from navigation",
            "Change the navigation style",
        ),
        priority=8,
    ),
    Capability(
        id="add_page",
        name="Add Page",
        description="Create a new page on the website",
        category=Cat.STRUCTURE,
        status=Status.COMING_SOON,
        triggers=("new page", "add page", "create page", "another page"),
        examples=("Add an about page", "Create a services page", "I need a contact page"),
        priority=8,
    ),
    # ── SEO ──────────────────────────────────────────────────────────────────
    Capability(
        id="update_seo",
        name="Update SEO",
        description="Change page title, meta description, and keywords for search engines",
        category=Cat.SEO,
        status=Status.ACTIVE,
        triggers=("seo", "meta", "title", "description", "google", "search engine", "page title"),
        tool_name="update_seo",
        examples=(
            "Update the page title",
            "Change the meta description",
            "Optimize for SEO",
            "Add keywords",
        ),
        priority=10,
    ),
    Capability(
        id="analyze_seo",
        name="Analyze SEO",
        description="Get SEO recommendations and score for the website",
        category=Cat.SEO,
        status=Status.ACTIVE,
        triggers=("analyze seo", "seo score", "improve seo", "seo audit", "check seo"),
        tool_name="analyze_seo",
        examples=(
            "Analyze my SEO",
            "How is my SEO?",
            "What can I do to improve search ranking?",
        ),
        priority=8,
    ),
    # ── Publishing ───────────────────────────────────────────────────────────
    Capability(
        id="publish_site",
        name="Publish Website",
        description="Make the website live on a subdomain",
        category=Cat.PUBLISHING,
        status=Status.ACTIVE,
        triggers=("publish", "go live", "launch", "make live", "deploy"),
        tool_name="publish_site",
        examples=("Publish my website", "Go live", "Launch the site", "Make my site public"),
        priority=10,
    ),
    Capability(
        id="connect_domain",
        name="Connect Custom Domain",
        description="Use your own domain name for the website",
        category=Cat.PUBLISHING,
        status=Status.COMING_SOON,
        triggers=("domain", "custom domain", "my domain", "connect domain"),
        requirements=CapabilityRequirements(plan=PlanTier.PRO),
        examples=("Connect my domain", "Use mycompany.com", "Set up a custom domain"),
        priority=8,
    ),
    Capability(
        id="preview_site",
        name="Preview Website",
        description="View a preview of the website before publishing",
        category=Cat.PUBLISHING,
        status=Status.ACTIVE,
        triggers=("preview", "show me", "view site", "see how it looks"),
        ui_component="SitePreview",
        examples=("Show me a preview", "Let me see how it looks", "Preview the website"),
        priority=6,
    ),
    # ── AI generation ────────────────────────────────────────────────────────
    Capability(
        id="generate_content",
        name="Generate Content",
        description="AI writes copy for any section including titles, descriptions, and items",
        category=Cat.AI_GENERATE,
        status=Status.ACTIVE,
        triggers=(
            "write", "generate text", "create content", "write copy",
            "content for", "text for",
        ),
        tool_name="generate_content",
        examples=(
            "Write content for the about section",
            "Generate testimonials",
            "Create FAQ content",
            "Write a compelling hero headline",
        ),
        priority=10,
    ),
    Capability(
        id="improve_content",
        name="Improve Content",
        description="AI enhances and rewrites existing text to be more compelling",
        category=Cat.AI_GENERATE,
        status=Status.ACTIVE,
        triggers=("improve", "rewrite", "make better", "enhance", "polish", "refine"),
        tool_name="improve_content",
        examples=(
            "Improve the hero text",
            "Make the about section more compelling",
            "Rewrite the services descriptions",
        ),
        priority=8,
    ),
    Capability(
        id="translate_content",
        name="Translate Content",
        description="Translate website content to another language",
        category=Cat.AI_GENERATE,
        status=Status.COMING_SOON,
        triggers=("translate", "language", "spanish", "french", "german", "multilingual"),
        examples=("Translate to Spanish", "Make a French version", "Add multilingual support"),
        priority=6,
    ),
    # ── Integrations ─────────────────────────────────────────────────────────
    Capability(
        id="add_form",
        name="Add Contact Form",
        description="Add a contact or lead capture form",
        category=Cat.INTEGRATIONS,
        status=Status.ACTIVE,
        triggers=("form", "contact form", "lead form", "subscribe form", "email form"),
        tool_name="add_form",
        examples=("Add a contact form", "Create a newsletter signup", "Add a lead capture form"),
        priority=8,
    ),
    Capability(
        id="add_analytics",
        name="Add Analytics",
        description="Connect Google Analytics or other tracking",
        category=Cat.INTEGRATIONS,
        status=Status.COMING_SOON,
        triggers=("analytics", "tracking", "google analytics", "statistics", "visitors"),
        examples=("Add Google Analytics", "Track visitors", "Set up analytics"),
        priority=6,
    ),
    # ── Information retrieval ────────────────────────────────────────────────
    Capability(
        id="get_site_info",
        name="Get Site Information",
        description="Get information about the current website state",
        category=Cat.CONTENT,
        status=Status.ACTIVE,
        triggers=("what sections", "show me", "current state", "what do i have", "list sections"),
        tool_name="get_site_info",
        examples=(
            "What sections do I have?",
            "Show me the current site structure",
            "List all sections",
        ),
        priority=4,
    ),
)


CAPABILITY_GROUPS: tuple[CapabilityGroup, ...] = (
    CapabilityGroup(
        id="content",
        name="Content",
        description="Add, edit, and organize your website content",
        categories=(Cat.CONTENT,),
        icon="file-text",
    ),
    CapabilityGroup(
        id="design",
        name="Design",
        description="Customize colors, fonts, and layouts",
        categories=(Cat.DESIGN,),
        icon="palette",
    ),
    CapabilityGroup(
        id="media",
        name="Media",
        description="Add images, videos, and other media",
        categories=(Cat.MEDIA,),
        icon="image",
    ),
    CapabilityGroup(
        id="seo",
        name="SEO",
        description="Optimize for search engines",
        categories=(Cat.SEO,),
        icon="search",
    ),
    CapabilityGroup(
        id="ai",
        name="AI Tools",
        description="AI-powered content and image generation",
        categories=(Cat.AI_GENERATE,),
        icon="sparkles",
    ),
    CapabilityGroup(
        id="publishing",
        name="Publishing",
        description="Preview and publish your website",
        categories=(Cat.PUBLISHING,),
        icon="globe",
    ),
)
