"""
URL configuration for django-blog-api.

Include in your project urls.py:

    path('api/', include('blog_api.urls')),
    handler404 = 'blog_api.views.system.not_found'
"""
from django.urls import include, path

from . import views

app_name = "blog_api"

auth_patterns = [
    path("signup", views.SignupView.as_view(), name="signup"),
    path("signin", views.SigninView.as_view(), name="signin"),
    path("signout", views.SignoutView.as_view(), name="signout"),
    path("refresh", views.RefreshView.as_view(), name="refresh"),
    path("forgot-password", views.ForgotPasswordView.as_view(), name="forgot_password"),
    path("reset-password", views.ResetPasswordView.as_view(), name="reset_password"),
    path("change-password", views.ChangePasswordView.as_view(), name="change_password"),
    path("check", views.CurrentUserView.as_view(), name="check"),
    path("profile", views.CurrentUserView.as_view(), name="auth_profile"),
    path("verify", views.VerifyTokenView.as_view(), name="verify"),
]

user_patterns = [
    path("profile", views.ProfileView.as_view(), name="user_profile"),
    path("all", views.UserListView.as_view(), name="user_list"),
    path("<int:pk>", views.UserDetailView.as_view(), name="user_detail"),
]

admin_patterns = [
    # Articles
    path("articles", views.ArticleListView.as_view(), name="article_list"),
    path("articles/stats", views.ArticleStatsView.as_view(), name="article_stats"),
    path("articles/<int:pk>", views.ArticleDetailView.as_view(), name="article_detail"),
    path(
        "articles/<int:pk>/status",
        views.ArticleStatusView.as_view(),
        name="article_status",
    ),

    # Categories
    path("categories", views.CategoryListView.as_view(), name="category_list"),
    path(
        "categories/hierarchy",
        views.CategoryHierarchyView.as_view(),
        name="category_hierarchy",
    ),
    path("categories/stats", views.CategoryStatsView.as_view(), name="category_stats"),
    path("categories/<int:pk>", views.CategoryDetailView.as_view(), name="category_detail"),
    path(
        "categories/<int:pk>/status",
        views.CategoryStatusView.as_view(),
        name="category_status",
    ),

    # Tags
    path("tags", views.TagListView.as_view(), name="tag_list"),
    path("tags/bulk", views.TagBulkCreateView.as_view(), name="tag_bulk"),
    path("tags/merge", views.TagMergeView.as_view(), name="tag_merge"),
    path("tags/cleanup", views.TagCleanupView.as_view(), name="tag_cleanup"),
    path("tags/popular", views.PopularTagsView.as_view(), name="tag_popular"),
    path("tags/cloud", views.TagCloudView.as_view(), name="tag_cloud"),
    path("tags/stats", views.TagStatsView.as_view(), name="tag_stats"),
    path("tags/<int:pk>", views.TagDetailView.as_view(), name="tag_detail"),

    # Media
    path("media", views.MediaListView.as_view(), name="media_list"),
    path("media/stats", views.MediaStatsView.as_view(), name="media_stats"),
    path("media/<int:pk>", views.MediaDetailView.as_view(), name="media_detail"),
]

public_patterns = [
    path("", views.PublishedArticleListView.as_view(), name="public_list"),
    path("home", views.HomeView.as_view(), name="home"),
    path("search", views.SearchView.as_view(), name="search"),
    path(
        "category/<slug:slug>",
        views.CategoryArticlesView.as_view(),
        name="category_articles",
    ),
    path("tag/<slug:slug>", views.TagArticlesView.as_view(), name="tag_articles"),
    # Must stay last, it matches any slug
    path("<slug:slug>", views.ArticleBySlugView.as_view(), name="article_by_slug"),
]

urlpatterns = [
    path("auth/", include(auth_patterns)),
    path("user/", include(user_patterns)),
    path("admin/", include(admin_patterns)),
    path("articles/", include(public_patterns)),
    path("upload/image", views.ImageUploadView.as_view(), name="upload_image"),
    path("health", views.HealthView.as_view(), name="health"),
]
