"""HTML parsing and extraction."""

import json
import logging
import re
from typing import Optional
from urllib.parse import urlparse

from bs4 import BeautifulSoup, Tag

from content_migration.core.constants import (
    CTA_CLASS_KEYWORDS,
    DEFAULT_LINK_TEXT,
    DOCUMENT_HREF_PATTERN,
    PAGE_TYPE_RULES,
    VIMEO_EMBED_CODE,
    VIMEO_PATTERN,
    VIMEO_WATCH_URL,
    YOUTUBE_EMBED_CODE,
    YOUTUBE_PATTERN,
    YOUTUBE_THUMBNAIL_URL,
    YOUTUBE_WATCH_URL,
)
from content_migration.core.utils import (
    generate_id,
    get_file_extension,
    normalize_text,
    parse_dimension,
    resolve_url,
    slug_from_url,
)
from content_migration.crawler.models import (
    ContentSection,
    CrawledPage,
    DocumentAsset,
    HeroCta,
    HeroSection,
    ImageAsset,
    MediaBlock,
    NavigationBlock,
    PageContent,
    PageMetadata,
    PageType,
    SeoBlock,
    VideoAsset,
)

logger = logging.getLogger(__name__)

_TAG_PATTERN = re.compile(r"<[^>]+>")
_HEADING_TAGS = ["h1", "h2", "h3", "h4", "h5", "h6"]


def _make_soup(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "lxml")


def _text_or_none(tag: Optional[Tag]) -> Optional[str]:
    if tag is None:
        return None
    text = normalize_text(tag.get_text(" "))
    return text or None


def _attr_or_none(tag: Tag, name: str) -> Optional[str]:
    value = tag.get(name)
    if isinstance(value, list):
        value = " ".join(value)
    if value is None:
        return None
    value = value.strip()
    return value or None


def _meta_content(soup: BeautifulSoup, attr: str, value: str) -> Optional[str]:
    """Content of the first ``<meta attr=value>`` tag, attribute order irrelevant."""
    wanted = value.lower()
    tag = soup.find("meta", attrs={attr: lambda v: v is not None and v.strip().lower() == wanted})
    if tag is None:
        return None
    return _attr_or_none(tag, "content")


def _has_class_containing(tag: Tag, needle: str) -> bool:
    classes = tag.get("class") or []
    return needle in " ".join(classes).lower()


def extract_title(soup: BeautifulSoup) -> str:
    """Extract page title, ``Untitled`` when missing."""
    return _text_or_none(soup.find("title")) or "Untitled"


def extract_metadata(html: str, url: str) -> PageMetadata:
    """Extract title, meta description/keywords, Open Graph tags and canonical URL."""
    soup = _make_soup(html)
    path = urlparse(url).path
    slug = "home" if path in ("", "/") else path.strip("/")

    keywords = _meta_content(soup, "name", "keywords") or ""
    canonical = soup.find("link", rel="canonical")

    return PageMetadata(
        url=url,
        slug=slug,
        title=extract_title(soup),
        meta_description=_meta_content(soup, "name", "description"),
        meta_keywords=[k.strip() for k in keywords.split(",") if k.strip()],
        og_title=_meta_content(soup, "property", "og:title"),
        og_description=_meta_content(soup, "property", "og:description"),
        og_image=_meta_content(soup, "property", "og:image"),
        canonical_url=_attr_or_none(canonical, "href") if canonical else None,
        published_date=_meta_content(soup, "property", "article:published_time"),
        last_modified=_meta_content(soup, "property", "article:modified_time"),
    )


def _find_video_urls(html: str) -> list[str]:
    urls = [YOUTUBE_WATCH_URL.format(video_id=m.group(1)) for m in YOUTUBE_PATTERN.finditer(html)]
    urls.extend(VIMEO_WATCH_URL.format(video_id=m.group(1)) for m in VIMEO_PATTERN.finditer(html))
    return list(dict.fromkeys(urls))


def _extract_hero(soup: BeautifulSoup) -> Optional[HeroSection]:
    hero = soup.find(["section", "div"], class_=lambda c: c is not None and "hero" in c.lower())
    if hero is None:
        return None

    image = hero.find("img", src=True)
    cta = None
    for anchor in hero.find_all("a", href=True):
        if any(_has_class_containing(anchor, kw) for kw in CTA_CLASS_KEYWORDS):
            text = _text_or_none(anchor)
            if text:
                cta = HeroCta(text=text, link=anchor["href"].strip())
                break

    return HeroSection(
        heading=_text_or_none(hero.find(_HEADING_TAGS)),
        subheading=_text_or_none(hero.find("p")),
        image=_attr_or_none(image, "src") if image else None,
        cta=cta,
    )


def extract_content(html: str) -> PageContent:
    """Extract the hero block and every ``<section>``/``<article>`` in document order."""
    soup = _make_soup(html)
    sections = []

    for order, block in enumerate(soup.find_all(["section", "article"])):
        sections.append(
            ContentSection(
                type="text",
                heading=_text_or_none(block.find(_HEADING_TAGS)),
                content=normalize_text(block.get_text(" ")),
                images=[src for src in (_attr_or_none(img, "src") for img in block.find_all("img")) if src],
                videos=_find_video_urls(str(block)),
                order=order,
            )
        )

    return PageContent(hero=_extract_hero(soup), sections=sections)


def extract_images(html: str, page_url: str) -> list[ImageAsset]:
    """One ImageAsset per ``<img>`` with a non-empty ``src``."""
    soup = _make_soup(html)
    images = []

    for img in soup.find_all("img"):
        src = _attr_or_none(img, "src")
        if not src:
            continue

        full_url = resolve_url(src, page_url)
        images.append(
            ImageAsset(
                id=generate_id("img"),
                source_url=full_url,
                alt=_attr_or_none(img, "alt"),
                title=_attr_or_none(img, "title"),
                width=parse_dimension(_attr_or_none(img, "width")),
                height=parse_dimension(_attr_or_none(img, "height")),
                format=get_file_extension(full_url),
                context="content",
                parent_page_url=page_url,
            )
        )

    return images


def extract_videos(html: str, page_url: str) -> list[VideoAsset]:
    """Find YouTube and Vimeo videos by URL pattern, one asset per distinct video."""
    videos = []
    seen: set[tuple[str, str]] = set()

    for match in YOUTUBE_PATTERN.finditer(html):
        video_id = match.group(1)
        if ("youtube", video_id) in seen:
            continue
        seen.add(("youtube", video_id))
        videos.append(
            VideoAsset(
                id=generate_id("vid"),
                platform="youtube",
                url=YOUTUBE_WATCH_URL.format(video_id=video_id),
                embed_code=YOUTUBE_EMBED_CODE.format(video_id=video_id),
                video_id=video_id,
                thumbnail_url=YOUTUBE_THUMBNAIL_URL.format(video_id=video_id),
                parent_page_url=page_url,
            )
        )

    for match in VIMEO_PATTERN.finditer(html):
        video_id = match.group(1)
        if ("vimeo", video_id) in seen:
            continue
        seen.add(("vimeo", video_id))
        videos.append(
            VideoAsset(
                id=generate_id("vid"),
                platform="vimeo",
                url=VIMEO_WATCH_URL.format(video_id=video_id),
                embed_code=VIMEO_EMBED_CODE.format(video_id=video_id),
                video_id=video_id,
                thumbnail_url=None,
                parent_page_url=page_url,
            )
        )

    return videos


def extract_documents(html: str, page_url: str) -> list[DocumentAsset]:
    """Anchors pointing at pdf/doc/docx/xls/xlsx/ppt/pptx files."""
    soup = _make_soup(html)
    documents = []

    for anchor in soup.find_all("a", href=True):
        href = anchor["href"].strip()
        match = DOCUMENT_HREF_PATTERN.search(href)
        if not match:
            continue

        url = resolve_url(href, page_url)
        file_name = url.rsplit("/", 1)[-1] or "document"
        documents.append(
            DocumentAsset(
                id=generate_id("doc"),
                url=url,
                file_name=file_name,
                file_type=match.group(1).lower(),
                link_text=_text_or_none(anchor) or file_name or DEFAULT_LINK_TEXT,
                parent_page_url=page_url,
            )
        )

    return documents


def extract_structured_data(html: str) -> Optional[list]:
    """Parse every JSON-LD block; malformed JSON is skipped."""
    soup = _make_soup(html)
    data = []

    for script in soup.find_all("script", type=lambda t: t is not None and t.strip().lower() == "application/ld+json"):
        raw = script.string if script.string is not None else script.get_text()
        try:
            data.append(json.loads(raw))
        except (TypeError, ValueError):
            logger.debug("Skipping malformed JSON-LD block")

    return data or None


def strip_html(html: str) -> str:
    """Replace every tag with a space and collapse whitespace."""
    return normalize_text(_TAG_PATTERN.sub(" ", html))


def count_words(html: str) -> int:
    """Approximate word count of the whole document, script and nav text included."""
    return len(strip_html(html).split())


def determine_page_type(url: str, title: str) -> PageType:
    """Classify a page by URL path and title keywords; first rule wins."""
    path = urlparse(url).path.lower()
    title_lower = title.lower()

    if path in ("", "/"):
        return PageType.HOME

    for page_type, path_keywords, title_keywords in PAGE_TYPE_RULES:
        if any(kw in path for kw in path_keywords) or any(kw in title_lower for kw in title_keywords):
            return PageType(page_type)

    return PageType.OTHER


def parse_page(
    url: str,
    html: str,
    http_status: int = 200,
    images: Optional[list[ImageAsset]] = None,
    videos: Optional[list[VideoAsset]] = None,
    documents: Optional[list[DocumentAsset]] = None,
) -> CrawledPage:
    """Parse HTML into a CrawledPage.

    Media lists can be passed in when the caller has already extracted them,
    so the page and the crawl-wide asset collections share the same records.
    """
    metadata = extract_metadata(html, url)

    return CrawledPage(
        url=url,
        slug=slug_from_url(url),
        title=metadata.title,
        page_type=determine_page_type(url, metadata.title),
        published_date=metadata.published_date,
        last_modified=metadata.last_modified,
        metadata=metadata,
        content=extract_content(html),
        seo=SeoBlock(
            keywords=metadata.meta_keywords,
            og_image=metadata.og_image,
            structured_data=extract_structured_data(html),
        ),
        navigation=NavigationBlock(breadcrumb=metadata.breadcrumb),
        media=MediaBlock(
            images=images if images is not None else extract_images(html, url),
            videos=videos if videos is not None else extract_videos(html, url),
            documents=documents if documents is not None else extract_documents(html, url),
        ),
        word_count=count_words(html),
        http_status=http_status,
    )
