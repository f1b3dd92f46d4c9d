from html import escape


async def view(request, pages, page):
    title = escape(page["title"])
    return (
        f"<html><head><title>{title}</title>"
        '<link rel="stylesheet" href="/style.css"></head>'
        f"<body><article>{page['body']}</article>"
        '<p><a href="/">Back</a></p></body></html>'
    )
