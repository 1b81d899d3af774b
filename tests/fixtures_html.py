"""Small hand-written HTML pages shaped like Instagram's rendered DOM."""


def grid_html(shortcodes: list[str], username: str = "alice") -> str:
    """Profile page with one grid link per shortcode (links appear twice, like IG's hover overlay)."""
    links = "".join(
        f'<a href="/{username}/p/{sc}/"><img src="https://scontent.cdninstagram.com/{sc}.jpg"></a>'
        f'<a href="/p/{sc}/"></a>'
        for sc in shortcodes
    )
    return f"<html><body><main><header><h2>{username}</h2></header><div>{links}</div></main></body></html>"


def post_html(
    shortcode: str,
    likes: str = "1,234",
    comments: str = "56",
    owner: str = "alice",
    caption: str = "Sunset over the bay",
    timestamp: str = "2024-03-03T17:02:11.000Z",
    video: bool = False,
    carousel: bool = False,
) -> str:
    """Post page carrying og: meta tags and an article, as Instagram renders it."""
    og_video = (
        f'<meta property="og:video" content="https://scontent.cdninstagram.com/{shortcode}.mp4">'
        if video else ""
    )
    next_button = '<button aria-label="Next"></button>' if carousel else ""
    return f"""
<html><head>
<meta property="og:url" content="https://www.instagram.com/p/{shortcode}/">
<meta property="og:title" content="{owner} on Instagram">
<meta property="og:description" content="{likes} likes, {comments} comments - {owner} on March 3, 2024: &quot;{caption}&quot;">
<meta property="og:image" content="https://scontent.cdninstagram.com/{shortcode}.jpg">
{og_video}
</head><body><main><article>
<header><a href="/{owner}/">{owner}</a></header>
<img src="https://scontent.cdninstagram.com/{shortcode}_full.jpg">
{next_button}
<h1>{caption}</h1>
<time datetime="{timestamp}">March 3</time>
</article></main></body></html>
"""


LOGIN_HTML = """
<html><body><form id="loginForm">
<input name="username" type="text"><input name="password" type="password">
</form></body></html>
"""

NOT_FOUND_HTML = """
<html><body><main><h2>Sorry, this page isn't available.</h2>
<p>The link you followed may be broken, or the page may have been removed.</p></main></body></html>
"""

CHALLENGE_HTML = """
<html><body><h2>Please wait a few minutes before you try again.</h2></body></html>
"""
