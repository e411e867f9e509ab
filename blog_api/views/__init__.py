"""
JSON API views.

Every view answers with the ``{"success", "message", "data"}`` envelope.
"""
from .articles import (
    ArticleDetailView,
    ArticleListView,
    ArticleStatsView,
    ArticleStatusView,
)
from .auth import (
    ChangePasswordView,
    CurrentUserView,
    ForgotPasswordView,
    RefreshView,
    ResetPasswordView,
    SigninView,
    SignoutView,
    SignupView,
    VerifyTokenView,
)
from .categories import (
    CategoryDetailView,
    CategoryHierarchyView,
    CategoryListView,
    CategoryStatsView,
    CategoryStatusView,
)
from .media import ImageUploadView, MediaDetailView, MediaListView, MediaStatsView
from .public import (
    ArticleBySlugView,
    CategoryArticlesView,
    HomeView,
    PublishedArticleListView,
    SearchView,
    TagArticlesView,
)
from .system import HealthView, not_found
from .tags import (
    PopularTagsView,
    TagBulkCreateView,
    TagCleanupView,
    TagCloudView,
    TagDetailView,
    TagListView,
    TagMergeView,
    TagStatsView,
)
from .users import ProfileView, UserDetailView, UserListView
