from myweblog.models.ids import ThemeAssetId, new_id
from myweblog.models.results import (
    BatchFailure,
    CategoryDeleteResult,
    DataResult,
    RestoreReport,
    ResultKind,
    StartUpReport,
)
from myweblog.models.view_models import DisplayCategory, UserDisplayName
from myweblog.models.weblog_models import (
    AccessLevel,
    Category,
    Comment,
    CommentStatus,
    CustomFeed,
    Episode,
    MarkupSource,
    MetaItem,
    Page,
    PodcastOptions,
    Post,
    PostStatus,
    RedirectRule,
    Revision,
    RssOptions,
    TagMap,
    Theme,
    ThemeAsset,
    ThemeTemplate,
    Upload,
    UploadDestination,
    WebLog,
    WebLogUser,
)
