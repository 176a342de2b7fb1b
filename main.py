"""Entry point for the notion-publish downloader."""

from notion_publish.main import main


if __name__ == "__main__":
    main()
