# Services package.
#
# Writes and reads are split:
#
#   article_service, comment_service, user_service
#       command functions taking an AsyncSession; they flush, the router's
#       ``get_db`` dependency commits.
#   *_read_service
#       read-only projections returning un-annotated views
#       (see ``protocols`` for the contracts).
#   *_query_service
#       assemble pages from the read services and merge in favorite counts
#       and the viewer's favorited / following flags.
