from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView


class ResourceListView(APIView):
    """GET lists the collection, POST creates a new member"""
    handler = None

    def get(self, request):
        return Response(self.handler.list())

    def post(self, request):
        return Response(self.handler.create(request.data), status=status.HTTP_201_CREATED)


class ResourceDetailView(APIView):
    """GET, PUT and DELETE on a single member"""
    handler = None

    def get(self, request, pk):
        return Response(self.handler.retrieve(pk))

    def put(self, request, pk):
        return Response(self.handler.update(pk, request.data))

    def delete(self, request, pk):
        return Response(self.handler.destroy(pk))
