# ==================== PARKNGO_BACKEND/URLS.PY ====================
from django.contrib import admin
from django.urls import path, include
from django.conf import settings
from django.conf.urls.static import static
from rest_framework.routers import DefaultRouter
from rest_framework_simplejwt.views import TokenRefreshView

from users.views import UserViewSet, RegisteredUserViewSet
from parking.views import ParkingLotViewSet, CategoryViewSet
from bookings.views import BookingViewSet, VehicleViewSet
from payments.views import PaymentViewSet
from payments.webhooks import payu_success, payu_failure, razorpay_callback

# Create router and register viewsets
router = DefaultRouter()
router.register(r'parking-lots', ParkingLotViewSet, basename='parking-lot')
router.register(r'categories', CategoryViewSet, basename='category')
router.register(r'bookings', BookingViewSet, basename='booking')
router.register(r'vehicles', VehicleViewSet, basename='vehicle')
router.register(r'users', RegisteredUserViewSet, basename='registered-user')

urlpatterns = [
    # Admin
    path('admin/', admin.site.urls),

    # API versioning
    path('api/v1/', include([
        # Authentication endpoints
        path('auth/', include([
            path('register/', UserViewSet.as_view({'post': 'register'}), name='register'),
            path('login/', UserViewSet.as_view({'post': 'login'}), name='login'),
            path('token/refresh/', TokenRefreshView.as_view(), name='token_refresh'),
            path('profile/', UserViewSet.as_view({'get': 'profile', 'put': 'profile'}), name='profile'),
            path('change-password/', UserViewSet.as_view({'post': 'change_password'}), name='change_password'),
        ])),

        # API routes
        path('', include(router.urls)),

        # Payments
        path('payments/', include([
            path('initiate/', PaymentViewSet.as_view({'post': 'initiate_payment'}), name='initiate_payment'),
            path('confirm/', PaymentViewSet.as_view({'post': 'confirm_payment'}), name='confirm_payment'),
            path('status/', PaymentViewSet.as_view({'post': 'payment_status'}), name='payment_status'),
        ])),
    ])),

    # Gateway redirects
    path('webhooks/', include([
        path('payu/success/', payu_success, name='payu_success'),
        path('payu/failure/', payu_failure, name='payu_failure'),
        path('razorpay/callback/', razorpay_callback, name='razorpay_callback'),
    ])),
]

if settings.DEBUG:
    urlpatterns += static(settings.STATIC_URL, document_root=settings.STATIC_ROOT)
